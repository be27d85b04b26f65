"""
Return Metrics

ROCE, yields and cash flow. The capital and income bases depend on the
exit strategy.
"""

import enum
import logging
import math
from dataclasses import dataclass
from typing import Optional

from propcalc.calculations.exit_strategy import ExitResult
from propcalc.calculations.income import IncomeSummary
from propcalc.calculations.inputs import ExitStrategy
from propcalc.calculations.parsing import safe_ratio

logger = logging.getLogger(__name__)


class RefinanceRocePolicy(str, enum.Enum):
    """
    Capital employed after a refinance.

    absolute: always divide by |money left in deal|.
    unbounded_on_surplus: all capital recovered (money left >= 0) means
        no capital is employed and ROCE is unbounded.
    """
    absolute = "absolute"
    unbounded_on_surplus = "unbounded_on_surplus"


@dataclass(frozen=True)
class KPIs:
    yield_percent: float
    net_yield_percent: float
    roce: float
    cash_flow: float
    total_return: Optional[float] = None
    total_return_percent: Optional[float] = None

    @property
    def roce_unbounded(self) -> bool:
        return math.isinf(self.roce)


def calculate_yield(
    total_monthly_income: float,
    purchase_price: float,
    exit_strategy: Optional[ExitStrategy],
    expected_gdv: float,
) -> float:
    """Gross yield on the refinance valuation when there is one, else on price."""
    base_price = purchase_price
    if exit_strategy == ExitStrategy.refinance_rent and expected_gdv > 0:
        base_price = expected_gdv
    return safe_ratio(total_monthly_income * 12, base_price)


def calculate_refinance_roce(
    net_annual_income: float,
    money_left_in_deal: float,
    policy: RefinanceRocePolicy = RefinanceRocePolicy.absolute,
) -> float:
    logger.debug(
        "Refinance ROCE inputs: net_annual_income=%s money_left_in_deal=%s policy=%s",
        net_annual_income,
        money_left_in_deal,
        policy.value,
    )
    if policy == RefinanceRocePolicy.unbounded_on_surplus and money_left_in_deal >= 0:
        return float("inf")

    capital_employed = abs(money_left_in_deal)
    if capital_employed == 0:
        return 0.0
    return net_annual_income / capital_employed * 100


def calculate_roce(
    exit_strategy: Optional[ExitStrategy],
    net_annual_income: float,
    total_project_costs: float,
    exit_result: ExitResult,
    refinance_policy: RefinanceRocePolicy = RefinanceRocePolicy.absolute,
) -> float:
    if exit_strategy == ExitStrategy.rent:
        return safe_ratio(net_annual_income, total_project_costs)
    if exit_strategy == ExitStrategy.refinance_rent:
        return calculate_refinance_roce(
            net_annual_income, exit_result.money_left_in_deal, refinance_policy
        )
    if exit_strategy == ExitStrategy.flip_sell:
        return safe_ratio(exit_result.total_return or 0.0, total_project_costs)
    return 0.0


def calculate_kpis(
    exit_strategy: Optional[ExitStrategy],
    purchase_price: float,
    expected_gdv: float,
    total_project_costs: float,
    income: IncomeSummary,
    exit_result: ExitResult,
    refinance_policy: RefinanceRocePolicy = RefinanceRocePolicy.absolute,
) -> KPIs:
    return KPIs(
        yield_percent=calculate_yield(
            income.total_monthly_income, purchase_price, exit_strategy, expected_gdv
        ),
        net_yield_percent=safe_ratio(income.net_annual_income, purchase_price),
        roce=calculate_roce(
            exit_strategy,
            income.net_annual_income,
            total_project_costs,
            exit_result,
            refinance_policy,
        ),
        cash_flow=income.net_monthly_income,
        total_return=exit_result.total_return,
        total_return_percent=exit_result.total_return_percent,
    )
