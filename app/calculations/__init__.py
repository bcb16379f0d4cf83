"""
Financial Calculation Engine

Pure, stateless calculators for loans, deposits, income tax and debt
payoff planning. Nothing here performs I/O or keeps state between calls.
"""

from app.calculations import amortization, deposit, tax, debt
from app.calculations.errors import InvalidInputError

__all__ = ["amortization", "deposit", "tax", "debt", "InvalidInputError"]
