"""
Create default calculators for properties that have none.

Usage:
    python scripts/backfill_calculator.py properties.csv

The CSV needs a `uprn` column and may carry a `purchase_price` column,
used to seed the purchase price and property value.
"""
import csv
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from propcalc.calculations.parsing import parse_amount
from propcalc.db.database import get_db_context, init_db
from propcalc.services.calculator_store import CalculatorStore


def read_properties(path):
    """Return (uprns, purchase_prices) from the CSV at path."""
    uprns = []
    purchase_prices = {}
    with open(path, newline="") as f:
        for row in csv.DictReader(f):
            uprn = (row.get("uprn") or "").strip()
            if not uprn:
                continue
            uprns.append(uprn)
            price = parse_amount(row.get("purchase_price"))
            if price > 0:
                purchase_prices[uprn] = price
    return uprns, purchase_prices


def main():
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)

    uprns, purchase_prices = read_properties(sys.argv[1])
    print(f"Properties in file: {len(uprns)}")

    init_db()
    with get_db_context() as db:
        created = CalculatorStore(db).backfill(uprns, purchase_prices)

    for uprn in created:
        print(f"  - created {uprn}")
    print(f"\nCreated {len(created)} calculators, {len(uprns) - len(created)} already existed.")


if __name__ == "__main__":
    main()
