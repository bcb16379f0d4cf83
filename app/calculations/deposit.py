"""
Fixed Deposit Calculations

Compound growth of a lump-sum deposit: maturity value, effective annual
rate and year-by-year balances.
"""

import math
from typing import List
from dataclasses import dataclass

from app.calculations.errors import InvalidInputError

MAX_TENURE_YEARS = 100

COMPOUNDING_FREQUENCIES = {
    1: "Annually",
    2: "Half-Yearly",
    4: "Quarterly",
    12: "Monthly",
}


@dataclass
class DepositInput:
    """A lump sum deposited at a fixed nominal annual rate."""

    principal: float
    annual_rate_percent: float
    years: float
    compounding_periods_per_year: int = 4


@dataclass
class DepositResult:
    """Deposit value at maturity."""

    maturity_amount: float
    total_interest: float
    effective_annual_rate_percent: float


@dataclass
class YearlyBalance:
    """Deposit balance movement over one year."""

    year: int
    opening_balance: float
    interest_earned: float
    closing_balance: float


@dataclass
class InterestComparison:
    """Simple interest vs compound interest on the same deposit."""

    simple_amount: float
    simple_interest: float
    compound_amount: float
    compound_interest: float
    compounding_advantage: float


def _validate_deposit(deposit: DepositInput) -> None:
    for label, value in (
        ("Principal", deposit.principal),
        ("Interest rate", deposit.annual_rate_percent),
        ("Tenure", deposit.years),
    ):
        if not math.isfinite(value):
            raise InvalidInputError(f"{label} must be a finite number, got {value}")
    if deposit.principal <= 0:
        raise InvalidInputError(f"Principal must be positive, got {deposit.principal}")
    if deposit.annual_rate_percent < 0:
        raise InvalidInputError(
            f"Interest rate cannot be negative, got {deposit.annual_rate_percent}"
        )
    if deposit.years <= 0:
        raise InvalidInputError(f"Tenure must be positive, got {deposit.years}")
    if deposit.years > MAX_TENURE_YEARS:
        raise InvalidInputError(
            f"Tenure cannot exceed {MAX_TENURE_YEARS} years, got {deposit.years}"
        )
    if deposit.compounding_periods_per_year not in COMPOUNDING_FREQUENCIES:
        raise InvalidInputError(
            f"Compounding frequency must be one of {sorted(COMPOUNDING_FREQUENCIES)}, "
            f"got {deposit.compounding_periods_per_year}"
        )


def _growth_factor(deposit: DepositInput, years: float) -> float:
    """(1 + r/n)^(n*t)"""
    n = deposit.compounding_periods_per_year
    rate = deposit.annual_rate_percent / 100
    try:
        return (1 + rate / n) ** (n * years)
    except OverflowError:
        raise InvalidInputError(
            f"Deposit growth at {deposit.annual_rate_percent}% over {years} years "
            f"is too large to calculate"
        )


def _value_after(deposit: DepositInput, years: float) -> float:
    """A = P * (1 + r/n)^(n*t)"""
    amount = deposit.principal * _growth_factor(deposit, years)
    if not math.isfinite(amount):
        raise InvalidInputError("Deposit maturity amount is too large to calculate")
    return amount


def compute_deposit(deposit: DepositInput) -> DepositResult:
    """
    Calculate maturity amount, interest and effective annual rate.

    A zero rate needs no special branch: every factor is exactly 1, so the
    maturity amount equals the principal.
    """
    _validate_deposit(deposit)

    maturity_amount = _value_after(deposit, deposit.years)
    effective_rate = (_growth_factor(deposit, 1) - 1) * 100

    return DepositResult(
        maturity_amount=maturity_amount,
        total_interest=maturity_amount - deposit.principal,
        effective_annual_rate_percent=effective_rate,
    )


def yearly_breakdown(deposit: DepositInput) -> List[YearlyBalance]:
    """
    Year-by-year opening balance, interest earned and closing balance.

    Each closing balance is recomputed from the principal rather than
    carried forward, so the final row matches ``compute_deposit`` exactly.
    A fractional tenure gets one extra row for the partial final year.
    """
    _validate_deposit(deposit)

    breakdown = []
    opening = deposit.principal
    whole_years = int(math.floor(deposit.years))

    for year in range(1, whole_years + 1):
        closing = _value_after(deposit, year)
        breakdown.append(
            YearlyBalance(
                year=year,
                opening_balance=opening,
                interest_earned=closing - opening,
                closing_balance=closing,
            )
        )
        opening = closing

    if deposit.years > whole_years:
        closing = _value_after(deposit, deposit.years)
        breakdown.append(
            YearlyBalance(
                year=whole_years + 1,
                opening_balance=opening,
                interest_earned=closing - opening,
                closing_balance=closing,
            )
        )

    return breakdown


def compare_simple_compound(deposit: DepositInput) -> InterestComparison:
    """Compare compound growth with simple interest over the same tenure."""
    result = compute_deposit(deposit)

    simple_interest = deposit.principal * deposit.annual_rate_percent / 100 * deposit.years

    return InterestComparison(
        simple_amount=deposit.principal + simple_interest,
        simple_interest=simple_interest,
        compound_amount=result.maturity_amount,
        compound_interest=result.total_interest,
        compounding_advantage=result.total_interest - simple_interest,
    )
