"""
Deal Inputs

Parsed, numeric view of a calculator snapshot. Every stage of the
engine reads from these dataclasses; none of them mutate.
"""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class PurchaseType(str, enum.Enum):
    """How the purchase is financed."""
    mortgage = "mortgage"
    cash = "cash"
    bridging = "bridging"


class ExitStrategy(str, enum.Enum):
    """How the deal is exited. A snapshot may have none selected."""
    rent = "just-rent"
    refinance_rent = "refinance-rent"
    flip_sell = "flip-sell"


class BridgingLoanType(str, enum.Enum):
    """Serviced interest is paid monthly, retained interest is deducted upfront."""
    serviced = "serviced"
    retained = "retained"


@dataclass(frozen=True)
class PurchaseFinance:
    purchase_price: float = 0.0
    ltv_percent: float = 0.0
    product_fee_percent: float = 0.0
    interest_rate_percent: float = 0.0  # annual


@dataclass(frozen=True)
class BridgingDetails:
    loan_type: BridgingLoanType = BridgingLoanType.serviced
    duration_months: float = 0.0
    gross_loan_percent: float = 0.0
    monthly_interest_percent: float = 0.0
    application_fee: float = 0.0


@dataclass(frozen=True)
class InitialCosts:
    legal: float = 0.0
    stamp_duty_percent: float = 0.0
    ila: float = 0.0
    broker_fees: float = 0.0
    auction_fees: float = 0.0
    finders_fee: float = 0.0
    refurb_repair: float = 0.0  # legacy field, still summed when present


@dataclass(frozen=True)
class RefurbishmentItem:
    id: int
    description: str = ""
    amount: float = 0.0


@dataclass(frozen=True)
class FundingSource:
    id: int
    name: str = ""
    amount: float = 0.0
    interest_rate_percent: float = 0.0  # annual
    duration_months: float = 0.0


@dataclass(frozen=True)
class RefinanceDetails:
    expected_gdv: float = 0.0
    new_loan_ltv_percent: float = 0.0
    interest_rate_percent: float = 0.0
    broker_fees: float = 0.0
    legal_fees: float = 0.0


@dataclass(frozen=True)
class SaleDetails:
    expected_sale_price: float = 0.0
    agency_fee_percent: float = 0.0
    legal_fees: float = 0.0


@dataclass(frozen=True)
class MonthlyExpenses:
    service_charge: float = 0.0
    ground_rent: float = 0.0
    maintenance_percent: float = 0.0
    management_percent: float = 0.0
    insurance: float = 0.0


@dataclass(frozen=True)
class DealInputs:
    """Everything the engine needs for one evaluation."""

    purchase_type: PurchaseType = PurchaseType.mortgage
    exit_strategy: Optional[ExitStrategy] = None
    include_fees_in_loan: bool = False
    purchase_finance: PurchaseFinance = field(default_factory=PurchaseFinance)
    bridging: BridgingDetails = field(default_factory=BridgingDetails)
    initial_costs: InitialCosts = field(default_factory=InitialCosts)
    refurb_items: Tuple[RefurbishmentItem, ...] = ()
    funding_sources: Tuple[FundingSource, ...] = ()
    refinance: RefinanceDetails = field(default_factory=RefinanceDetails)
    sale: SaleDetails = field(default_factory=SaleDetails)
    monthly_rents: Tuple[float, ...] = ()
    monthly_expenses: MonthlyExpenses = field(default_factory=MonthlyExpenses)

    @property
    def purchase_price(self) -> float:
        return self.purchase_finance.purchase_price


MAX_RENT_LINES = 5


def rent_lines(values: List[float]) -> Tuple[float, ...]:
    """Keep at most MAX_RENT_LINES monthly rents."""
    return tuple(values[:MAX_RENT_LINES])
