"""
Loan Amortization Calculations

Implements EMI (equated monthly installment) and month-by-month
amortization schedules for fixed-rate loans.
"""

import math
from typing import List, Dict, Optional
from datetime import date
from dataclasses import dataclass
from dateutil.relativedelta import relativedelta

from app.calculations.errors import InvalidInputError

MAX_TENURE_YEARS = 100


# Default annual rates (percent) offered per loan type
LOAN_PRESETS = {
    "home": {
        "name": "Home Loan",
        "default_rate": 8.5,
        "description": "Tax benefits available under Section 80C & 24(b)",
    },
    "car": {
        "name": "Car Loan",
        "default_rate": 9.0,
        "description": "Shorter tenure recommended for better rates",
    },
    "personal": {
        "name": "Personal Loan",
        "default_rate": 12.0,
        "description": "No collateral required, higher interest rates",
    },
}


@dataclass
class LoanInput:
    """A fixed-rate loan repaid in equal monthly installments."""

    principal: float
    annual_rate_percent: float
    tenure_years: float

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate_percent / 100 / 12

    @property
    def periods(self) -> int:
        return int(round(self.tenure_years * 12))


@dataclass
class AmortizationEntry:
    """One month of the repayment schedule."""

    month: int
    payment: float
    principal_portion: float
    interest_portion: float
    remaining_balance: float
    payment_date: Optional[date] = None


@dataclass
class AmortizationResult:
    """EMI summary plus the full schedule."""

    emi: float
    total_payment: float
    total_interest: float
    principal_share_percent: float
    interest_share_percent: float
    schedule: List[AmortizationEntry]


def calculate_emi(principal: float, monthly_rate: float, periods: int) -> float:
    """
    Calculate the equated monthly installment.

    Args:
        principal: Loan principal amount
        monthly_rate: Monthly interest rate as decimal (e.g., 0.0075)
        periods: Number of monthly payments

    Returns:
        Monthly payment amount

    Raises:
        InvalidInputError: If inputs are not positive finite numbers or the
            payment is too large to represent
    """
    if not (math.isfinite(principal) and math.isfinite(monthly_rate)):
        raise InvalidInputError("Principal and interest rate must be finite numbers")
    if principal <= 0:
        raise InvalidInputError(f"Principal must be positive, got {principal}")
    if periods <= 0:
        raise InvalidInputError(f"Number of periods must be positive, got {periods}")
    if monthly_rate < 0:
        raise InvalidInputError(f"Interest rate cannot be negative, got {monthly_rate}")

    if monthly_rate == 0:
        return principal / periods

    try:
        factor = (1 + monthly_rate) ** periods
    except OverflowError:
        raise InvalidInputError(
            f"Interest rate {monthly_rate} over {periods} periods is too large to calculate"
        )

    # Rate too small to register in float precision
    if factor == 1:
        return principal / periods

    emi = principal * monthly_rate * factor / (factor - 1)
    if not math.isfinite(emi):
        raise InvalidInputError("Loan is too large to calculate an installment")
    return emi


def _validate_loan(loan: LoanInput) -> None:
    for label, value in (
        ("Principal", loan.principal),
        ("Interest rate", loan.annual_rate_percent),
        ("Tenure", loan.tenure_years),
    ):
        if not math.isfinite(value):
            raise InvalidInputError(f"{label} must be a finite number, got {value}")
    if loan.principal <= 0:
        raise InvalidInputError(f"Principal must be positive, got {loan.principal}")
    if loan.annual_rate_percent < 0:
        raise InvalidInputError(
            f"Interest rate cannot be negative, got {loan.annual_rate_percent}"
        )
    if loan.tenure_years <= 0:
        raise InvalidInputError(f"Tenure must be positive, got {loan.tenure_years}")
    if loan.tenure_years > MAX_TENURE_YEARS:
        raise InvalidInputError(
            f"Tenure cannot exceed {MAX_TENURE_YEARS} years, got {loan.tenure_years}"
        )
    if loan.periods <= 0:
        raise InvalidInputError(
            f"Tenure of {loan.tenure_years} years is shorter than one monthly payment"
        )


def compute_amortization(
    loan: LoanInput, start_date: Optional[date] = None
) -> AmortizationResult:
    """
    Compute the EMI, totals and month-by-month schedule for a loan.

    The final period pays exactly the remaining balance so the schedule
    always closes at zero regardless of floating point drift.

    Args:
        loan: Loan parameters
        start_date: Date of the first payment (optional)

    Returns:
        AmortizationResult with one schedule entry per month
    """
    _validate_loan(loan)

    principal = loan.principal
    monthly_rate = loan.monthly_rate
    periods = loan.periods

    emi = calculate_emi(principal, monthly_rate, periods)
    total_payment = emi * periods
    if not math.isfinite(total_payment):
        raise InvalidInputError("Loan is too large to calculate a repayment schedule")
    total_interest = total_payment - principal

    schedule = []
    balance = principal

    for month in range(1, periods + 1):
        interest = balance * monthly_rate

        if month == periods:
            # Pay off whatever is left
            principal_pmt = balance
        else:
            principal_pmt = min(emi - interest, balance)

        balance = max(0.0, balance - principal_pmt)

        schedule.append(
            AmortizationEntry(
                month=month,
                payment=principal_pmt + interest,
                principal_portion=principal_pmt,
                interest_portion=interest,
                remaining_balance=balance,
                payment_date=(
                    start_date + relativedelta(months=month - 1) if start_date else None
                ),
            )
        )

    return AmortizationResult(
        emi=emi,
        total_payment=total_payment,
        total_interest=total_interest,
        principal_share_percent=principal / total_payment * 100,
        interest_share_percent=total_interest / total_payment * 100,
        schedule=schedule,
    )


def annualize_schedule(schedule: List[AmortizationEntry]) -> List[Dict]:
    """
    Convert a monthly schedule to yearly totals.
    """
    annual_data = []

    for entry in schedule:
        year = (entry.month - 1) // 12 + 1

        if not annual_data or annual_data[-1]["year"] != year:
            annual_data.append(
                {
                    "year": year,
                    "payment": 0.0,
                    "principal": 0.0,
                    "interest": 0.0,
                    "closing_balance": 0.0,
                }
            )

        totals = annual_data[-1]
        totals["payment"] += entry.payment
        totals["principal"] += entry.principal_portion
        totals["interest"] += entry.interest_portion
        totals["closing_balance"] = entry.remaining_balance

    return annual_data
