"""
Deal Calculation Engine

Derives finance costs, project totals, exit proceeds, cash flow and
return metrics from a calculator snapshot. Pure functions throughout.
"""

from propcalc.calculations import (
    engine,
    exit_strategy,
    financing,
    income,
    inputs,
    kpi,
    parsing,
    percent_link,
    project_costs,
    snapshot,
)

__all__ = [
    "engine",
    "exit_strategy",
    "financing",
    "income",
    "inputs",
    "kpi",
    "parsing",
    "percent_link",
    "project_costs",
    "snapshot",
]
