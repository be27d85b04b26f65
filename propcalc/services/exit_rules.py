"""
Which exit strategies suit which purchase types.

The engine computes any combination; these rules are applied by callers
when the purchase type changes.
"""

from typing import Optional, Tuple

from propcalc.calculations.inputs import ExitStrategy, PurchaseType
from propcalc.calculations.snapshot import CalculatorSnapshot

ALLOWED_EXIT_STRATEGIES = {
    PurchaseType.mortgage: (ExitStrategy.rent,),
    PurchaseType.bridging: (ExitStrategy.refinance_rent, ExitStrategy.flip_sell),
    PurchaseType.cash: (
        ExitStrategy.rent,
        ExitStrategy.refinance_rent,
        ExitStrategy.flip_sell,
    ),
}


def allowed_exit_strategies(purchase_type: PurchaseType) -> Tuple[ExitStrategy, ...]:
    return ALLOWED_EXIT_STRATEGIES[purchase_type]


def coerce_exit_strategy(
    purchase_type: PurchaseType, current: Optional[ExitStrategy]
) -> Optional[ExitStrategy]:
    """
    Pick the exit strategy after a purchase type change.

    A mortgage can only be rented out. A bridging loan must be exited, so
    a plain rent becomes a refinance. Cash keeps whatever was chosen.
    """
    if purchase_type == PurchaseType.mortgage:
        return ExitStrategy.rent
    if purchase_type == PurchaseType.bridging and current == ExitStrategy.rent:
        return ExitStrategy.refinance_rent
    return current


def change_purchase_type(
    snapshot: CalculatorSnapshot, purchase_type: PurchaseType
) -> CalculatorSnapshot:
    return snapshot.model_copy(
        update={
            "purchase_type": purchase_type,
            "exit_strategy": coerce_exit_strategy(purchase_type, snapshot.exit_strategy),
        }
    )
