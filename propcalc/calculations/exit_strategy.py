"""
Exit Strategy Calculations

Refinance and sale proceeds, what is left in the deal after the purchase
lender is repaid, and the profit on a flip.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Optional

from propcalc.calculations.inputs import (
    ExitStrategy,
    FundingSource,
    RefinanceDetails,
    SaleDetails,
)
from propcalc.calculations.parsing import safe_ratio
from propcalc.calculations.percent_link import amount_of


class SaleProfitPolicy(str, enum.Enum):
    """
    What a flip's profit is measured against.

    full_settlement: also repay the purchase lender and funding interest.
    net_of_project_costs: sale proceeds less project costs only.
    """
    full_settlement = "full_settlement"
    net_of_project_costs = "net_of_project_costs"


@dataclass(frozen=True)
class ExitResult:
    """Derived exit figures. Fields not used by the strategy stay at 0."""

    strategy: Optional[ExitStrategy]
    finance_repayment: float = 0.0
    total_funding_interest: float = 0.0
    # Refinance
    new_loan_amount: float = 0.0
    refinance_costs: float = 0.0
    net_refinance_proceeds: float = 0.0
    money_left_in_deal: float = 0.0
    refinance_mortgage_payment: float = 0.0
    # Sale
    agency_fee_amount: float = 0.0
    sale_costs: float = 0.0
    net_sale_proceeds: float = 0.0
    # None where the strategy has no notion of a total return
    total_return: Optional[float] = None
    total_return_percent: Optional[float] = None

    @property
    def refinance_surplus(self) -> bool:
        return self.money_left_in_deal >= 0


def calculate_source_interest(source: FundingSource) -> float:
    """
    Simple interest owed on one funding source over its own duration.

    Sources missing an amount, rate or duration owe nothing.
    """
    if source.amount <= 0 or source.interest_rate_percent <= 0 or source.duration_months <= 0:
        return 0.0
    return source.amount * source.interest_rate_percent / 100 * (source.duration_months / 12)


def total_funding_interest(sources: Iterable[FundingSource]) -> float:
    return sum(calculate_source_interest(source) for source in sources)


def resolve_refinance(
    refinance: RefinanceDetails,
    finance_repayment: float,
    total_project_costs: float,
    funding_interest: float,
) -> ExitResult:
    new_loan = 0.0
    if refinance.expected_gdv > 0 and refinance.new_loan_ltv_percent > 0:
        new_loan = refinance.expected_gdv * refinance.new_loan_ltv_percent / 100

    refinance_costs = refinance.broker_fees + refinance.legal_fees
    net_proceeds = new_loan - refinance_costs

    payment = 0.0
    if new_loan > 0 and refinance.interest_rate_percent > 0:
        payment = new_loan * refinance.interest_rate_percent / 100 / 12

    money_left = (
        new_loan
        - finance_repayment
        - refinance_costs
        - total_project_costs
        - funding_interest
    )
    total_return = net_proceeds - total_project_costs

    return ExitResult(
        strategy=ExitStrategy.refinance_rent,
        finance_repayment=finance_repayment,
        total_funding_interest=funding_interest,
        new_loan_amount=new_loan,
        refinance_costs=refinance_costs,
        net_refinance_proceeds=net_proceeds,
        money_left_in_deal=money_left,
        refinance_mortgage_payment=payment,
        total_return=total_return,
        total_return_percent=safe_ratio(total_return, total_project_costs),
    )


def resolve_sale(
    sale: SaleDetails,
    finance_repayment: float,
    total_project_costs: float,
    funding_interest: float,
    policy: SaleProfitPolicy = SaleProfitPolicy.full_settlement,
) -> ExitResult:
    agency_fee = amount_of(sale.agency_fee_percent, sale.expected_sale_price)
    sale_costs = agency_fee + sale.legal_fees
    net_proceeds = sale.expected_sale_price - sale_costs

    if policy == SaleProfitPolicy.full_settlement:
        total_return = (
            net_proceeds - finance_repayment - total_project_costs - funding_interest
        )
    elif policy == SaleProfitPolicy.net_of_project_costs:
        total_return = net_proceeds - total_project_costs
    else:
        raise ValueError(f"Unsupported sale profit policy: {policy}")

    return ExitResult(
        strategy=ExitStrategy.flip_sell,
        finance_repayment=finance_repayment,
        total_funding_interest=funding_interest,
        agency_fee_amount=agency_fee,
        sale_costs=sale_costs,
        net_sale_proceeds=net_proceeds,
        total_return=total_return,
        total_return_percent=safe_ratio(total_return, total_project_costs),
    )


def resolve_exit(
    strategy: Optional[ExitStrategy],
    refinance: RefinanceDetails,
    sale: SaleDetails,
    finance_repayment: float,
    total_project_costs: float,
    funding_sources: Iterable[FundingSource],
    sale_policy: SaleProfitPolicy = SaleProfitPolicy.full_settlement,
) -> ExitResult:
    """
    Resolve the exit for the selected strategy.

    Rent and an undecided strategy produce no proceeds; the purchase
    mortgage keeps servicing the property.
    """
    funding_interest = total_funding_interest(funding_sources)

    if strategy is None or strategy == ExitStrategy.rent:
        return ExitResult(
            strategy=strategy,
            finance_repayment=finance_repayment,
            total_funding_interest=funding_interest,
        )
    if strategy == ExitStrategy.refinance_rent:
        return resolve_refinance(
            refinance, finance_repayment, total_project_costs, funding_interest
        )
    if strategy == ExitStrategy.flip_sell:
        return resolve_sale(
            sale, finance_repayment, total_project_costs, funding_interest, sale_policy
        )
    raise ValueError(f"Unsupported exit strategy: {strategy}")
