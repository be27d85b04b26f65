"""
Calculator Snapshot Schema

The stored and transmitted form of a deal analysis. Numeric leaves are
text, exactly as typed; an empty string means zero.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from propcalc.calculations.inputs import (
    BridgingDetails,
    BridgingLoanType,
    DealInputs,
    ExitStrategy,
    FundingSource,
    InitialCosts,
    MonthlyExpenses,
    PurchaseFinance,
    PurchaseType,
    RefinanceDetails,
    RefurbishmentItem,
    SaleDetails,
    rent_lines,
)
from propcalc.calculations.parsing import parse_amount

DEFAULT_FUNDING_SOURCE_NAME = "Personal"


class SnapshotModel(BaseModel):
    """Base for snapshot sections: camelCase on the wire, numbers accepted as text."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "allow"

    @field_validator("*", mode="before")
    @classmethod
    def numbers_as_text(cls, value, info):
        field = cls.model_fields.get(info.field_name)
        if field is None or field.annotation is not str:
            return value
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class BridgingDetailsData(SnapshotModel):
    loan_type: BridgingLoanType = BridgingLoanType.serviced
    duration: str = ""
    gross_loan_percent: str = ""
    gross_loan_amount: str = ""
    monthly_interest: str = ""
    application_fee: str = ""


class RefinanceDetailsData(SnapshotModel):
    expected_gdv: str = Field("", alias="expectedGDV")
    new_loan_ltv: str = Field("", alias="newLoanLTV")
    new_loan_amount: str = ""
    interest_rate: str = ""
    broker_fees: str = ""
    legal_fees: str = ""


class SaleDetailsData(SnapshotModel):
    expected_sale_price: str = ""
    agency_fee_percent: str = ""
    agency_fee_amount: str = ""
    legal_fees: str = ""


class RefurbItemData(SnapshotModel):
    id: int
    description: str = ""
    amount: str = ""


class FundingSourceData(SnapshotModel):
    id: int
    name: str = ""
    amount: str = ""
    interest_rate: str = ""
    duration: str = ""


class InitialCostsData(SnapshotModel):
    refurb_repair: str = ""
    legal: str = ""
    stamp_duty_percent: str = ""
    stamp_duty_amount: str = ""
    ila: str = ""
    broker_fees: str = ""
    auction_fees: str = ""
    finders_fee: str = ""


class PurchaseFinanceData(SnapshotModel):
    purchase_price: str = ""
    deposit: str = ""
    ltv: str = ""
    loan_amount: str = ""
    product_fee: str = ""
    product_fee_amount: str = ""
    interest_rate: str = ""


class MonthlyIncomeData(SnapshotModel):
    rent1: str = ""
    rent2: str = ""
    rent3: str = ""
    rent4: str = ""
    rent5: str = ""

    def rents(self) -> List[str]:
        return [self.rent1, self.rent2, self.rent3, self.rent4, self.rent5]


class MonthlyExpensesData(SnapshotModel):
    service_charge: str = ""
    ground_rent: str = ""
    maintenance_percent: str = ""
    maintenance_amount: str = ""
    management_percent: str = ""
    management_amount: str = ""
    insurance: str = ""
    mortgage_payment: str = ""


def _default_refurb_items() -> List[RefurbItemData]:
    return [RefurbItemData(id=1)]


def _default_funding_sources() -> List[FundingSourceData]:
    return [FundingSourceData(id=1, name=DEFAULT_FUNDING_SOURCE_NAME)]


class CalculatorSnapshot(SnapshotModel):
    """A complete calculator state for one property."""

    purchase_type: PurchaseType = PurchaseType.mortgage
    include_fees_in_loan: bool = False
    bridging_details: BridgingDetailsData = Field(default_factory=BridgingDetailsData)
    exit_strategy: Optional[ExitStrategy] = None
    refinance_details: RefinanceDetailsData = Field(default_factory=RefinanceDetailsData)
    sale_details: SaleDetailsData = Field(default_factory=SaleDetailsData)
    refurb_items: List[RefurbItemData] = Field(default_factory=_default_refurb_items)
    funding_sources: List[FundingSourceData] = Field(default_factory=_default_funding_sources)
    initial_costs: InitialCostsData = Field(default_factory=InitialCostsData)
    purchase_finance: PurchaseFinanceData = Field(default_factory=PurchaseFinanceData)
    monthly_income: MonthlyIncomeData = Field(default_factory=MonthlyIncomeData)
    monthly_expenses: MonthlyExpensesData = Field(default_factory=MonthlyExpensesData)
    property_value: str = ""

    def to_storage(self) -> dict:
        """Plain JSON-compatible dict with wire (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


def default_snapshot(purchase_price: Optional[float] = None) -> CalculatorSnapshot:
    """
    Blank calculator for a property with no saved analysis.

    A purchase price from the property's attributes seeds both the
    purchase price and the property value.
    """
    snapshot = CalculatorSnapshot()
    if purchase_price is not None and purchase_price > 0:
        seed = str(purchase_price)
        if float(purchase_price).is_integer():
            seed = str(int(purchase_price))
        snapshot.purchase_finance.purchase_price = seed
        snapshot.property_value = seed
    return snapshot


def to_inputs(snapshot: CalculatorSnapshot) -> DealInputs:
    """Parse every numeric text field of a snapshot into DealInputs."""
    finance = snapshot.purchase_finance
    bridging = snapshot.bridging_details
    costs = snapshot.initial_costs
    refinance = snapshot.refinance_details
    sale = snapshot.sale_details
    expenses = snapshot.monthly_expenses

    return DealInputs(
        purchase_type=snapshot.purchase_type,
        exit_strategy=snapshot.exit_strategy,
        include_fees_in_loan=snapshot.include_fees_in_loan,
        purchase_finance=PurchaseFinance(
            purchase_price=parse_amount(finance.purchase_price),
            ltv_percent=parse_amount(finance.ltv),
            product_fee_percent=parse_amount(finance.product_fee),
            interest_rate_percent=parse_amount(finance.interest_rate),
        ),
        bridging=BridgingDetails(
            loan_type=bridging.loan_type,
            duration_months=parse_amount(bridging.duration),
            gross_loan_percent=parse_amount(bridging.gross_loan_percent),
            monthly_interest_percent=parse_amount(bridging.monthly_interest),
            application_fee=parse_amount(bridging.application_fee),
        ),
        initial_costs=InitialCosts(
            legal=parse_amount(costs.legal),
            stamp_duty_percent=parse_amount(costs.stamp_duty_percent),
            ila=parse_amount(costs.ila),
            broker_fees=parse_amount(costs.broker_fees),
            auction_fees=parse_amount(costs.auction_fees),
            finders_fee=parse_amount(costs.finders_fee),
            refurb_repair=parse_amount(costs.refurb_repair),
        ),
        refurb_items=tuple(
            RefurbishmentItem(
                id=item.id,
                description=item.description,
                amount=parse_amount(item.amount),
            )
            for item in snapshot.refurb_items
        ),
        funding_sources=tuple(
            FundingSource(
                id=source.id,
                name=source.name,
                amount=parse_amount(source.amount),
                interest_rate_percent=parse_amount(source.interest_rate),
                duration_months=parse_amount(source.duration),
            )
            for source in snapshot.funding_sources
        ),
        refinance=RefinanceDetails(
            expected_gdv=parse_amount(refinance.expected_gdv),
            new_loan_ltv_percent=parse_amount(refinance.new_loan_ltv),
            interest_rate_percent=parse_amount(refinance.interest_rate),
            broker_fees=parse_amount(refinance.broker_fees),
            legal_fees=parse_amount(refinance.legal_fees),
        ),
        sale=SaleDetails(
            expected_sale_price=parse_amount(sale.expected_sale_price),
            agency_fee_percent=parse_amount(sale.agency_fee_percent),
            legal_fees=parse_amount(sale.legal_fees),
        ),
        monthly_rents=rent_lines(
            [parse_amount(value) for value in snapshot.monthly_income.rents()]
        ),
        monthly_expenses=MonthlyExpenses(
            service_charge=parse_amount(expenses.service_charge),
            ground_rent=parse_amount(expenses.ground_rent),
            maintenance_percent=parse_amount(expenses.maintenance_percent),
            management_percent=parse_amount(expenses.management_percent),
            insurance=parse_amount(expenses.insurance),
        ),
    )
