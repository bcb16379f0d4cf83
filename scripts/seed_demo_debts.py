"""
Seed the debt planner with a sample set of debts.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.database import get_db_context, init_db
from app.db.models import Debt

DEMO_DEBTS = [
    {
        "name": "HDFC Credit Card",
        "debt_type": "Credit Card",
        "balance": 85000,
        "interest_rate": 42.0,
        "minimum_payment": 4250,
        "due_day": 5,
    },
    {
        "name": "Personal Loan",
        "debt_type": "Personal Loan",
        "balance": 300000,
        "interest_rate": 12.0,
        "minimum_payment": 10000,
        "due_day": 10,
    },
    {
        "name": "Car Loan",
        "debt_type": "Car Loan",
        "balance": 450000,
        "interest_rate": 9.0,
        "minimum_payment": 12500,
        "due_day": 15,
    },
]


def main():
    init_db()

    with get_db_context() as db:
        existing = db.query(Debt).filter(Debt.is_deleted == False).count()
        if existing:
            print(f"{existing} debts already saved. Skipping.")
            return

        for priority, data in enumerate(DEMO_DEBTS, start=1):
            db.add(Debt(priority=priority, **data))
            print(f"  {data['name']}: {data['balance']:,.0f} at {data['interest_rate']}%")

    print(f"\nCreated {len(DEMO_DEBTS)} demo debts")


if __name__ == "__main__":
    main()
