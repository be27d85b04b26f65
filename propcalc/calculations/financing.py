"""
Purchase Financing

Resolves the loan, deposit and fees for the chosen purchase type and the
resulting cost of finance: the cash the buyer must put in to complete.
"""

from dataclasses import dataclass

from propcalc.calculations.inputs import (
    BridgingDetails,
    BridgingLoanType,
    PurchaseFinance,
    PurchaseType,
)
from propcalc.calculations.parsing import safe_ratio
from propcalc.calculations.percent_link import amount_of


@dataclass(frozen=True)
class FinancingResult:
    """Derived purchase-finance figures. Unused fields stay at 0."""

    purchase_type: PurchaseType
    loan_amount: float = 0.0  # base loan (mortgage) or gross loan (bridging)
    deposit_amount: float = 0.0
    product_fee_amount: float = 0.0
    final_loan_amount: float = 0.0
    effective_ltv: float = 0.0
    monthly_mortgage_payment: float = 0.0
    total_interest: float = 0.0  # retained bridging interest
    application_fee: float = 0.0
    net_advance: float = 0.0
    monthly_serviced_interest: float = 0.0
    cost_of_finance: float = 0.0

    @property
    def finance_repayment(self) -> float:
        """Amount owed to the purchase lender on exit."""
        if self.purchase_type == PurchaseType.cash:
            return 0.0
        if self.purchase_type == PurchaseType.bridging:
            return self.loan_amount
        return self.final_loan_amount


def resolve_cash(purchase_price: float) -> FinancingResult:
    """Cash purchase: the whole price is the cost of finance."""
    return FinancingResult(
        purchase_type=PurchaseType.cash,
        cost_of_finance=max(purchase_price, 0.0),
    )


def resolve_mortgage(
    finance: PurchaseFinance, include_fees_in_loan: bool
) -> FinancingResult:
    """
    Interest-only buy-to-let mortgage.

    The product fee is either added to the loan or paid upfront, in which
    case it is part of the cost of finance.
    """
    price = finance.purchase_price
    if price <= 0:
        return FinancingResult(purchase_type=PurchaseType.mortgage)
    if finance.ltv_percent <= 0:
        # No loan yet: the whole price is deposit
        return FinancingResult(
            purchase_type=PurchaseType.mortgage,
            deposit_amount=price,
            cost_of_finance=price,
        )

    base_loan = price * finance.ltv_percent / 100
    deposit = price - base_loan
    product_fee = amount_of(finance.product_fee_percent, base_loan)

    final_loan = base_loan + (product_fee if include_fees_in_loan else 0.0)

    monthly_payment = 0.0
    if final_loan > 0 and finance.interest_rate_percent > 0:
        monthly_payment = final_loan * finance.interest_rate_percent / 100 / 12

    return FinancingResult(
        purchase_type=PurchaseType.mortgage,
        loan_amount=base_loan,
        deposit_amount=deposit,
        product_fee_amount=product_fee,
        final_loan_amount=final_loan,
        effective_ltv=safe_ratio(final_loan, price),
        monthly_mortgage_payment=monthly_payment,
        cost_of_finance=deposit + (0.0 if include_fees_in_loan else product_fee),
    )


def resolve_bridging(
    finance: PurchaseFinance, bridging: BridgingDetails
) -> FinancingResult:
    """
    Short-term bridging loan.

    Fees, and for retained loans the whole term's interest, come out of the
    gross loan; the buyer funds the gap between price and net advance.
    """
    price = finance.purchase_price
    if price <= 0:
        return FinancingResult(purchase_type=PurchaseType.bridging)
    if bridging.gross_loan_percent <= 0:
        return FinancingResult(
            purchase_type=PurchaseType.bridging,
            deposit_amount=price,
            cost_of_finance=price,
        )

    gross_loan = price * bridging.gross_loan_percent / 100
    product_fee = amount_of(finance.product_fee_percent, gross_loan)

    total_interest = 0.0
    if (
        bridging.loan_type == BridgingLoanType.retained
        and bridging.monthly_interest_percent > 0
        and bridging.duration_months > 0
    ):
        total_interest = (
            gross_loan * bridging.monthly_interest_percent / 100 * bridging.duration_months
        )

    net_advance = gross_loan - product_fee - bridging.application_fee - total_interest

    serviced_interest = 0.0
    if bridging.loan_type == BridgingLoanType.serviced:
        # Informational only, paid monthly outside the project cost
        serviced_interest = net_advance * bridging.monthly_interest_percent / 100

    return FinancingResult(
        purchase_type=PurchaseType.bridging,
        loan_amount=gross_loan,
        deposit_amount=price - gross_loan,
        product_fee_amount=product_fee,
        final_loan_amount=gross_loan,
        effective_ltv=safe_ratio(gross_loan, price),
        total_interest=total_interest,
        application_fee=bridging.application_fee,
        net_advance=net_advance,
        monthly_serviced_interest=serviced_interest,
        cost_of_finance=price - net_advance,
    )


def resolve_financing(
    purchase_type: PurchaseType,
    finance: PurchaseFinance,
    bridging: BridgingDetails,
    include_fees_in_loan: bool = False,
) -> FinancingResult:
    """Dispatch to the resolver for the purchase type."""
    if purchase_type == PurchaseType.cash:
        return resolve_cash(finance.purchase_price)
    if purchase_type == PurchaseType.mortgage:
        return resolve_mortgage(finance, include_fees_in_loan)
    if purchase_type == PurchaseType.bridging:
        return resolve_bridging(finance, bridging)
    raise ValueError(f"Unsupported purchase type: {purchase_type}")
