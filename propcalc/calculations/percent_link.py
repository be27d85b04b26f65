"""
Percentage / Amount Link

Keeps a percentage field and its absolute amount in step. The caller
says which side was just edited; the other side is derived from it.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PercentEdit:
    """The percentage side was edited."""

    value: float


@dataclass(frozen=True)
class AmountEdit:
    """The amount side was edited."""

    value: float


Edited = Union[PercentEdit, AmountEdit]


@dataclass(frozen=True)
class LinkedValue:
    percent: float
    amount: float


def resolve(edited: Edited, base: float) -> LinkedValue:
    """
    Derive the missing side of a percentage/amount pair.

    No rounding is applied; display rounding is up to the caller.

    Args:
        edited: PercentEdit or AmountEdit carrying the typed value
        base: The amount the percentage applies to (e.g. purchase price)

    Returns:
        LinkedValue with both sides populated
    """
    if isinstance(edited, PercentEdit):
        if base <= 0:
            # Nothing to take a percentage of
            return LinkedValue(percent=edited.value, amount=0.0)
        return LinkedValue(percent=edited.value, amount=base * edited.value / 100)

    if isinstance(edited, AmountEdit):
        if base <= 0:
            return LinkedValue(percent=0.0, amount=edited.value)
        return LinkedValue(percent=edited.value / base * 100, amount=edited.value)

    raise TypeError(f"Unsupported edit: {edited!r}")


def amount_of(percent: float, base: float) -> float:
    """Amount for a percentage of base, 0 when either side is not positive."""
    if base <= 0 or percent <= 0:
        return 0.0
    return base * percent / 100
