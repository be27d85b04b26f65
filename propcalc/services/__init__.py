"""
Application services module.
"""

from propcalc.services.calculator_store import CalculatorStore
from propcalc.services.exit_rules import allowed_exit_strategies, change_purchase_type
from propcalc.services.line_items import LineItemError, LineItemKind

__all__ = [
    "CalculatorStore",
    "LineItemError",
    "LineItemKind",
    "allowed_exit_strategies",
    "change_purchase_type",
]
