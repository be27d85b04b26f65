"""
Deal Calculation Engine

Runs a snapshot through every stage, leaf first:

    percent/amount link -> financing -> project costs -> exit
    -> income and expenses -> KPIs

Each stage is a pure function of the ones before it. The whole pipeline
is rerun on every change; identical snapshots give identical results.
"""

import enum
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from propcalc.calculations.exit_strategy import ExitResult, SaleProfitPolicy, resolve_exit
from propcalc.calculations.financing import FinancingResult, resolve_financing
from propcalc.calculations.income import (
    IncomeSummary,
    active_mortgage_payment,
    aggregate_income,
)
from propcalc.calculations.inputs import DealInputs, ExitStrategy, PurchaseType
from propcalc.calculations.kpi import KPIs, RefinanceRocePolicy, calculate_kpis
from propcalc.calculations.parsing import finite_or_zero, format_amount
from propcalc.calculations.percent_link import Edited, PercentEdit, resolve
from propcalc.calculations.project_costs import (
    DEFAULT_FUNDING_TOLERANCE,
    ProjectCosts,
    aggregate_project_costs,
)
from propcalc.calculations.snapshot import CalculatorSnapshot, to_inputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnginePolicy:
    """Choices where past versions of the calculator disagreed."""

    refinance_roce: RefinanceRocePolicy = RefinanceRocePolicy.absolute
    sale_profit: SaleProfitPolicy = SaleProfitPolicy.full_settlement
    funding_tolerance: float = DEFAULT_FUNDING_TOLERANCE

    @classmethod
    def from_settings(cls, settings) -> "EnginePolicy":
        return cls(
            refinance_roce=RefinanceRocePolicy(settings.refinance_roce_policy),
            sale_profit=SaleProfitPolicy(settings.sale_profit_policy),
            funding_tolerance=settings.funding_tolerance,
        )


class LinkedPair(str, enum.Enum):
    """Percentage/amount field pairs kept in step by the link."""
    ltv = "ltv"
    product_fee = "productFee"
    stamp_duty = "stampDuty"
    gross_loan = "grossLoan"
    new_loan = "newLoan"
    agency_fee = "agencyFee"
    maintenance = "maintenance"
    management = "management"


# pair -> (snapshot section, percent field, amount field)
PAIR_FIELDS = {
    LinkedPair.ltv: ("purchase_finance", "ltv", "loan_amount"),
    LinkedPair.product_fee: ("purchase_finance", "product_fee", "product_fee_amount"),
    LinkedPair.stamp_duty: ("initial_costs", "stamp_duty_percent", "stamp_duty_amount"),
    LinkedPair.gross_loan: ("bridging_details", "gross_loan_percent", "gross_loan_amount"),
    LinkedPair.new_loan: ("refinance_details", "new_loan_ltv", "new_loan_amount"),
    LinkedPair.agency_fee: ("sale_details", "agency_fee_percent", "agency_fee_amount"),
    LinkedPair.maintenance: ("monthly_expenses", "maintenance_percent", "maintenance_amount"),
    LinkedPair.management: ("monthly_expenses", "management_percent", "management_amount"),
}


@dataclass(frozen=True)
class FieldEdit:
    """The one linked field the user just changed."""

    pair: LinkedPair
    edited: Edited


def link_base(pair: LinkedPair, inputs: DealInputs) -> float:
    """The amount a linked percentage is taken of."""
    price = inputs.purchase_price
    if pair in (LinkedPair.ltv, LinkedPair.stamp_duty, LinkedPair.gross_loan):
        return price
    if pair == LinkedPair.product_fee:
        if price <= 0:
            return 0.0
        if inputs.purchase_type == PurchaseType.mortgage:
            return price * max(inputs.purchase_finance.ltv_percent, 0.0) / 100
        if inputs.purchase_type == PurchaseType.bridging:
            return price * max(inputs.bridging.gross_loan_percent, 0.0) / 100
        return 0.0
    if pair == LinkedPair.new_loan:
        return inputs.refinance.expected_gdv
    if pair == LinkedPair.agency_fee:
        return inputs.sale.expected_sale_price
    if pair in (LinkedPair.maintenance, LinkedPair.management):
        return sum(inputs.monthly_rents)
    raise ValueError(f"Unsupported linked pair: {pair}")


def apply_edit(snapshot: CalculatorSnapshot, edit: FieldEdit) -> CalculatorSnapshot:
    """Return a copy of the snapshot with the edited pair brought into step."""
    section_name, percent_field, amount_field = PAIR_FIELDS[edit.pair]
    linked = resolve(edit.edited, link_base(edit.pair, to_inputs(snapshot)))

    section = getattr(snapshot, section_name).model_copy(
        update={
            percent_field: format_amount(linked.percent),
            amount_field: format_amount(linked.amount),
        }
    )
    return snapshot.model_copy(update={section_name: section})


@dataclass(frozen=True)
class DerivedValues:
    financing: FinancingResult
    costs: ProjectCosts
    exit: ExitResult
    income: IncomeSummary
    kpis: KPIs


def evaluate(inputs: DealInputs, policy: Optional[EnginePolicy] = None) -> DerivedValues:
    """Run every stage over parsed inputs."""
    policy = policy or EnginePolicy()

    financing = resolve_financing(
        inputs.purchase_type,
        inputs.purchase_finance,
        inputs.bridging,
        inputs.include_fees_in_loan,
    )
    costs = aggregate_project_costs(
        inputs.purchase_price,
        financing.cost_of_finance,
        inputs.initial_costs,
        inputs.refurb_items,
        inputs.funding_sources,
        tolerance=policy.funding_tolerance,
    )
    exit_result = resolve_exit(
        inputs.exit_strategy,
        inputs.refinance,
        inputs.sale,
        financing.finance_repayment,
        costs.total_project_costs,
        inputs.funding_sources,
        sale_policy=policy.sale_profit,
    )
    income = aggregate_income(
        inputs.monthly_rents,
        inputs.monthly_expenses,
        active_mortgage_payment(
            inputs.purchase_type,
            inputs.exit_strategy,
            financing.monthly_mortgage_payment,
            exit_result.refinance_mortgage_payment,
        ),
    )
    kpis = calculate_kpis(
        inputs.exit_strategy,
        inputs.purchase_price,
        inputs.refinance.expected_gdv,
        costs.total_project_costs,
        income,
        exit_result,
        refinance_policy=policy.refinance_roce,
    )
    return DerivedValues(
        financing=financing, costs=costs, exit=exit_result, income=income, kpis=kpis
    )


def _amount_updates(
    inputs: DealInputs, derived: DerivedValues
) -> Tuple[Tuple[str, str, float], ...]:
    """(section, field, value) for every amount the engine owns."""
    financing = derived.financing
    updates = [
        ("purchase_finance", "deposit", financing.deposit_amount),
        ("purchase_finance", "product_fee_amount", financing.product_fee_amount),
        ("initial_costs", "stamp_duty_amount", derived.costs.stamp_duty_amount),
        ("monthly_expenses", "maintenance_amount", derived.income.maintenance_amount),
        ("monthly_expenses", "management_amount", derived.income.management_amount),
        ("monthly_expenses", "mortgage_payment", derived.income.active_mortgage_payment),
    ]
    if inputs.purchase_type == PurchaseType.mortgage:
        updates.append(("purchase_finance", "loan_amount", financing.loan_amount))
    if inputs.purchase_type == PurchaseType.bridging:
        updates.append(("bridging_details", "gross_loan_amount", financing.loan_amount))
    if inputs.exit_strategy == ExitStrategy.refinance_rent:
        updates.append(("refinance_details", "new_loan_amount", derived.exit.new_loan_amount))
    if inputs.exit_strategy == ExitStrategy.flip_sell:
        updates.append(("sale_details", "agency_fee_amount", derived.exit.agency_fee_amount))
    return tuple(updates)


def augment(
    snapshot: CalculatorSnapshot,
    inputs: DealInputs,
    derived: DerivedValues,
    keep: Optional[Tuple[str, str]] = None,
) -> CalculatorSnapshot:
    """
    Copy derived amounts back into the snapshot's amount fields.

    `keep` names a (section, field) to leave as typed, the amount the
    user has just entered.
    """
    sections = {}
    for section_name, field_name, value in _amount_updates(inputs, derived):
        if (section_name, field_name) == keep:
            continue
        sections.setdefault(section_name, {})[field_name] = format_amount(value)

    update = {
        name: getattr(snapshot, name).model_copy(update=fields)
        for name, fields in sections.items()
    }
    return snapshot.model_copy(update=update)


class DerivedSnapshot(BaseModel):
    """Derived values as returned alongside a snapshot."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("*", mode="before")
    @classmethod
    def finite_numbers(cls, value):
        # JSON has no infinity or NaN; overflowed figures are reported as 0
        if isinstance(value, float):
            return finite_or_zero(value)
        return value

    # Financing
    loan_amount: float
    deposit_amount: float
    product_fee_amount: float
    final_loan_amount: float
    effective_ltv: float
    monthly_mortgage_payment: float
    total_interest: float
    net_advance: float
    monthly_serviced_interest: float
    cost_of_finance: float
    finance_repayment: float

    # Project costs
    stamp_duty_amount: float
    total_initial_costs: float
    total_refurb_costs: float
    amount_needed_to_purchase: float
    total_project_costs: float
    total_funding_sources: float
    funding_gap: float
    funding_shortfall: bool
    funding_surplus: bool

    # Exit
    total_funding_interest: float
    new_loan_amount: float
    refinance_costs: float
    net_refinance_proceeds: float
    money_left_in_deal: float
    refinance_surplus: bool
    refinance_mortgage_payment: float
    agency_fee_amount: float
    sale_costs: float
    net_sale_proceeds: float

    # Income
    total_monthly_income: float
    maintenance_amount: float
    management_amount: float
    active_mortgage_payment: float
    total_monthly_expenses: float
    net_monthly_income: float
    net_annual_income: float

    # KPIs
    yield_percent: float
    net_yield_percent: float
    roce: Optional[float] = None
    roce_unbounded: bool = False
    cash_flow: float
    total_return: Optional[float] = None
    total_return_percent: Optional[float] = None

    @classmethod
    def from_values(cls, derived: DerivedValues) -> "DerivedSnapshot":
        financing = derived.financing
        costs = derived.costs
        exit_result = derived.exit
        income = derived.income
        kpis = derived.kpis

        return cls(
            loan_amount=financing.loan_amount,
            deposit_amount=financing.deposit_amount,
            product_fee_amount=financing.product_fee_amount,
            final_loan_amount=financing.final_loan_amount,
            effective_ltv=financing.effective_ltv,
            monthly_mortgage_payment=financing.monthly_mortgage_payment,
            total_interest=financing.total_interest,
            net_advance=financing.net_advance,
            monthly_serviced_interest=financing.monthly_serviced_interest,
            cost_of_finance=financing.cost_of_finance,
            finance_repayment=financing.finance_repayment,
            stamp_duty_amount=costs.stamp_duty_amount,
            total_initial_costs=costs.total_initial_costs,
            total_refurb_costs=costs.total_refurb_costs,
            amount_needed_to_purchase=costs.amount_needed_to_purchase,
            total_project_costs=costs.total_project_costs,
            total_funding_sources=costs.total_funding_sources,
            funding_gap=costs.funding_gap,
            funding_shortfall=costs.funding_shortfall,
            funding_surplus=costs.funding_surplus,
            total_funding_interest=exit_result.total_funding_interest,
            new_loan_amount=exit_result.new_loan_amount,
            refinance_costs=exit_result.refinance_costs,
            net_refinance_proceeds=exit_result.net_refinance_proceeds,
            money_left_in_deal=exit_result.money_left_in_deal,
            refinance_surplus=exit_result.refinance_surplus,
            refinance_mortgage_payment=exit_result.refinance_mortgage_payment,
            agency_fee_amount=exit_result.agency_fee_amount,
            sale_costs=exit_result.sale_costs,
            net_sale_proceeds=exit_result.net_sale_proceeds,
            total_monthly_income=income.total_monthly_income,
            maintenance_amount=income.maintenance_amount,
            management_amount=income.management_amount,
            active_mortgage_payment=income.active_mortgage_payment,
            total_monthly_expenses=income.total_monthly_expenses,
            net_monthly_income=income.net_monthly_income,
            net_annual_income=income.net_annual_income,
            yield_percent=kpis.yield_percent,
            net_yield_percent=kpis.net_yield_percent,
            # JSON has no infinity
            roce=None if math.isinf(kpis.roce) else kpis.roce,
            roce_unbounded=kpis.roce_unbounded,
            cash_flow=kpis.cash_flow,
            total_return=kpis.total_return,
            total_return_percent=kpis.total_return_percent,
        )


@dataclass(frozen=True)
class RecomputeResult:
    snapshot: CalculatorSnapshot
    derived: DerivedValues

    def derived_snapshot(self) -> DerivedSnapshot:
        return DerivedSnapshot.from_values(self.derived)


def recompute(
    snapshot: CalculatorSnapshot,
    edit: Optional[FieldEdit] = None,
    policy: Optional[EnginePolicy] = None,
) -> RecomputeResult:
    """
    Evaluate a snapshot from scratch.

    Args:
        snapshot: The raw calculator state
        edit: The linked field just changed, if any
        policy: Open-question choices; defaults to EnginePolicy()

    Returns:
        RecomputeResult with the normalised snapshot (linked pair synced,
        derived amounts filled in) and every derived value
    """
    keep = None
    if edit is not None:
        snapshot = apply_edit(snapshot, edit)
        if not isinstance(edit.edited, PercentEdit):
            section_name, _, amount_field = PAIR_FIELDS[edit.pair]
            keep = (section_name, amount_field)

    inputs = to_inputs(snapshot)
    logger.debug(
        "Recompute: purchase_type=%s exit_strategy=%s edit=%s",
        inputs.purchase_type.value,
        inputs.exit_strategy.value if inputs.exit_strategy else None,
        edit.pair.value if edit else None,
    )
    derived = evaluate(inputs, policy)
    return RecomputeResult(snapshot=augment(snapshot, inputs, derived, keep), derived=derived)
