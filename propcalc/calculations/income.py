"""
Monthly Income and Expenses

Rental income less running costs and the active mortgage payment.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from propcalc.calculations.inputs import ExitStrategy, MonthlyExpenses, PurchaseType
from propcalc.calculations.percent_link import amount_of


@dataclass(frozen=True)
class IncomeSummary:
    total_monthly_income: float
    maintenance_amount: float
    management_amount: float
    active_mortgage_payment: float
    total_monthly_expenses: float
    net_monthly_income: float

    @property
    def net_annual_income(self) -> float:
        return self.net_monthly_income * 12


def active_mortgage_payment(
    purchase_type: PurchaseType,
    exit_strategy: Optional[ExitStrategy],
    monthly_mortgage_payment: float,
    refinance_mortgage_payment: float,
) -> float:
    """Refinancing replaces the purchase mortgage; otherwise only a mortgage pays one."""
    if exit_strategy == ExitStrategy.refinance_rent:
        return refinance_mortgage_payment
    if purchase_type == PurchaseType.mortgage:
        return monthly_mortgage_payment
    return 0.0


def aggregate_income(
    rents: Iterable[float],
    expenses: MonthlyExpenses,
    mortgage_payment: float,
) -> IncomeSummary:
    total_income = sum(rents)
    maintenance = amount_of(expenses.maintenance_percent, total_income)
    management = amount_of(expenses.management_percent, total_income)

    total_expenses = (
        expenses.service_charge
        + expenses.ground_rent
        + expenses.insurance
        + maintenance
        + management
        + mortgage_payment
    )

    return IncomeSummary(
        total_monthly_income=total_income,
        maintenance_amount=maintenance,
        management_amount=management,
        active_mortgage_payment=mortgage_payment,
        total_monthly_expenses=total_expenses,
        net_monthly_income=total_income - total_expenses,
    )
