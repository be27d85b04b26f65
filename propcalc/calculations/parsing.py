"""
Numeric Text Parsing

Calculator fields travel as text. Anything that does not parse is a zero.
"""

import math
from typing import Union

CURRENCY_CHARS = ("£", ",")


def parse_amount(value: Union[str, int, float, None]) -> float:
    """
    Parse a calculator field into a float.

    Accepts "£300,000", "300000", 300000 or "". Empty, invalid, NaN
    and infinite inputs all come back as 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = value.strip()
        for char in CURRENCY_CHARS:
            cleaned = cleaned.replace(char, "")
        if not cleaned:
            return 0.0
        try:
            number = float(cleaned)
        except ValueError:
            return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def finite_or_zero(value: float) -> float:
    """Overflowed (infinite) or undefined (NaN) results collapse to 0."""
    if not math.isfinite(value):
        return 0.0
    return value


def format_amount(value: float) -> str:
    """Render a derived amount back into snapshot text."""
    value = finite_or_zero(value)
    if value == int(value):
        return str(int(value))
    return repr(value)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Percentage ratio that is 0 for a zero or negative denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100
