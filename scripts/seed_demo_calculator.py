"""
Seed the database with two demo calculators: a buy-to-let on a mortgage
and a bridged refurbish-and-flip.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from propcalc.calculations.engine import recompute
from propcalc.calculations.snapshot import CalculatorSnapshot
from propcalc.db.database import SessionLocal, init_db
from propcalc.services.calculator_store import CalculatorStore

DEMO_CALCULATORS = {
    # Two-bed flat, let on an interest-only mortgage
    "100023336956": {
        "purchaseType": "mortgage",
        "exitStrategy": "just-rent",
        "purchaseFinance": {
            "purchasePrice": "300000",
            "ltv": "75",
            "productFee": "1.5",
            "interestRate": "5",
        },
        "initialCosts": {"legal": "1500", "stampDutyPercent": "3"},
        "monthlyIncome": {"rent1": "1200", "rent2": "800"},
        "monthlyExpenses": {
            "serviceCharge": "50",
            "groundRent": "25",
            "insurance": "30",
            "maintenancePercent": "10",
            "managementPercent": "10",
        },
        "propertyValue": "300000",
    },
    # Terrace bought at auction on a retained bridge, refurbished and sold
    "10033544614": {
        "purchaseType": "bridging",
        "exitStrategy": "flip-sell",
        "bridgingDetails": {
            "loanType": "retained",
            "duration": "6",
            "grossLoanPercent": "70",
            "monthlyInterest": "1",
            "applicationFee": "500",
        },
        "purchaseFinance": {"purchasePrice": "200000", "productFee": "2"},
        "initialCosts": {"legal": "1500", "auctionFees": "1200"},
        "refurbItems": [
            {"id": 1, "description": "Kitchen", "amount": "18000"},
            {"id": 2, "description": "Rewire", "amount": "7500"},
            {"id": 3, "description": "Decoration", "amount": "4500"},
        ],
        "fundingSources": [
            {"id": 1, "name": "Personal", "amount": "60000"},
            {"id": 2, "name": "JV partner", "amount": "44400", "interestRate": "10", "duration": "6"},
        ],
        "saleDetails": {
            "expectedSalePrice": "300000",
            "agencyFeePercent": "1.5",
            "legalFees": "1500",
        },
        "propertyValue": "200000",
    },
}


def main():
    init_db()
    db = SessionLocal()

    try:
        store = CalculatorStore(db)

        for uprn, data in DEMO_CALCULATORS.items():
            if store.get_record(uprn) is not None:
                print(f"Calculator for {uprn} already exists, skipping")
                continue

            result = recompute(CalculatorSnapshot.model_validate(data))
            store.save(uprn, result.snapshot)

            derived = result.derived_snapshot()
            print(f"Created calculator for {uprn} ({data['purchaseType']}, {data['exitStrategy']})")
            print(f"  Total project costs: {derived.total_project_costs:,.2f}")
            print(f"  Funding gap: {derived.funding_gap:,.2f}")
            print(f"  ROCE: {derived.roce:.2f}%" if derived.roce is not None else "  ROCE: unbounded")

        print("\nDemo calculators created successfully!")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
