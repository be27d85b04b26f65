"""
Project Cost Aggregation

Totals the cash a deal needs (finance, purchase costs, works) and
reconciles it against the money raised to fund it.
"""

from dataclasses import dataclass
from typing import Iterable

from propcalc.calculations.inputs import FundingSource, InitialCosts, RefurbishmentItem
from propcalc.calculations.percent_link import amount_of

DEFAULT_FUNDING_TOLERANCE = 0.01


@dataclass(frozen=True)
class ProjectCosts:
    stamp_duty_amount: float
    total_initial_costs: float
    total_refurb_costs: float
    cost_of_finance: float
    amount_needed_to_purchase: float
    total_project_costs: float
    total_funding_sources: float
    funding_gap: float
    funding_shortfall: bool
    funding_surplus: bool

    @property
    def funding_balanced(self) -> bool:
        return not self.funding_shortfall and not self.funding_surplus


def calculate_initial_costs(costs: InitialCosts, purchase_price: float) -> float:
    """Sum purchase costs, including stamp duty as a share of the price."""
    return (
        costs.legal
        + costs.ila
        + costs.broker_fees
        + costs.auction_fees
        + costs.finders_fee
        + costs.refurb_repair
        + amount_of(costs.stamp_duty_percent, purchase_price)
    )


def sum_refurb_items(items: Iterable[RefurbishmentItem]) -> float:
    return sum(item.amount for item in items)


def sum_funding_sources(sources: Iterable[FundingSource]) -> float:
    return sum(source.amount for source in sources)


def aggregate_project_costs(
    purchase_price: float,
    cost_of_finance: float,
    initial_costs: InitialCosts,
    refurb_items: Iterable[RefurbishmentItem],
    funding_sources: Iterable[FundingSource],
    tolerance: float = DEFAULT_FUNDING_TOLERANCE,
) -> ProjectCosts:
    """
    Aggregate total project cost and the funding gap.

    Args:
        purchase_price: Purchase price, the stamp duty base
        cost_of_finance: From the financing resolver
        initial_costs: Legal, broker and other purchase costs
        refurb_items: Works line items
        funding_sources: Where the cash comes from
        tolerance: Gap below which funding counts as balanced

    Returns:
        ProjectCosts with a positive funding_gap meaning a shortfall
    """
    stamp_duty = amount_of(initial_costs.stamp_duty_percent, purchase_price)
    total_initial = calculate_initial_costs(initial_costs, purchase_price)
    total_refurb = sum_refurb_items(refurb_items)
    total_project = cost_of_finance + total_initial + total_refurb
    total_funding = sum_funding_sources(funding_sources)
    gap = total_project - total_funding

    return ProjectCosts(
        stamp_duty_amount=stamp_duty,
        total_initial_costs=total_initial,
        total_refurb_costs=total_refurb,
        cost_of_finance=cost_of_finance,
        amount_needed_to_purchase=total_initial + cost_of_finance,
        total_project_costs=total_project,
        total_funding_sources=total_funding,
        funding_gap=gap,
        funding_shortfall=gap > tolerance,
        funding_surplus=gap < -tolerance,
    )
