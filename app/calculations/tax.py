"""
Income Tax Calculations

Progressive (slab) income tax under named regimes. Regimes are plain data:
an ordered bracket table, a cess rate and whether deductions apply. Adding
a regime or a new fiscal year's slabs only means adding a table.
"""

from typing import List, Dict, Optional, Union
from dataclasses import dataclass, field

from app.calculations.errors import InvalidInputError


@dataclass(frozen=True)
class TaxBracket:
    """
    One income band.

    The band runs from the previous bracket's upper bound (0 for the first)
    up to and including ``upper_bound``. ``None`` marks the open top band.
    """

    upper_bound: Optional[float]
    rate_percent: float


@dataclass(frozen=True)
class TaxRegime:
    """A named slab table plus cess and deduction rules."""

    name: str
    brackets: tuple
    cess_rate_percent: float = 4.0
    allows_deductions: bool = False
    description: str = ""


@dataclass
class Deductions:
    """Deductions claimable under the old regime (amounts, not limits)."""

    section_80c: float = 0.0
    section_80d: float = 0.0
    section_24b: float = 0.0
    nps: float = 0.0

    @property
    def total(self) -> float:
        return self.section_80c + self.section_80d + self.section_24b + self.nps


@dataclass
class TaxResult:
    """Tax computed for one income under one regime."""

    regime: str
    gross_income: float
    deductions: float
    taxable_income: float
    base_tax: float
    cess: float
    total_tax: float
    net_income: float
    effective_rate_percent: float
    marginal_rate_percent: float


@dataclass
class RegimeComparison:
    """Both regimes side by side for the same income."""

    results: Dict[str, TaxResult] = field(default_factory=dict)
    recommended: str = ""
    savings: float = 0.0


# FY 2023-24 slabs
NEW_REGIME = TaxRegime(
    name="new",
    brackets=(
        TaxBracket(300_000, 0),
        TaxBracket(600_000, 5),
        TaxBracket(900_000, 10),
        TaxBracket(1_200_000, 15),
        TaxBracket(1_500_000, 20),
        TaxBracket(None, 30),
    ),
    cess_rate_percent=4.0,
    allows_deductions=False,
    description="Lower slab rates, no deductions",
)

OLD_REGIME = TaxRegime(
    name="old",
    brackets=(
        TaxBracket(250_000, 0),
        TaxBracket(500_000, 5),
        TaxBracket(1_000_000, 20),
        TaxBracket(None, 30),
    ),
    cess_rate_percent=4.0,
    allows_deductions=True,
    description="Higher slab rates, deductions under 80C, 80D, 24(b) and NPS",
)

REGIMES: Dict[str, TaxRegime] = {
    NEW_REGIME.name: NEW_REGIME,
    OLD_REGIME.name: OLD_REGIME,
}


def get_regime(name: str) -> TaxRegime:
    """Look up a regime by name."""
    try:
        return REGIMES[name.lower()]
    except KeyError:
        raise InvalidInputError(
            f"Unknown tax regime '{name}'. Available: {', '.join(sorted(REGIMES))}"
        )


def _validate_brackets(brackets) -> None:
    if not brackets:
        raise InvalidInputError("Tax bracket table cannot be empty")
    if brackets[-1].upper_bound is not None:
        raise InvalidInputError("The last tax bracket must be open-ended (upper_bound=None)")
    if any(b.upper_bound is None for b in brackets[:-1]):
        raise InvalidInputError("Only the last tax bracket can be open-ended")

    bounds = [b.upper_bound for b in brackets[:-1]]
    if any(upper <= lower for lower, upper in zip([0.0] + bounds, bounds)):
        raise InvalidInputError("Tax brackets must be in ascending order")


def calculate_slab_tax(taxable_income: float, brackets: List[TaxBracket]) -> tuple:
    """
    Apply a slab table to a taxable income.

    Each band's slice of the income is taxed at that band's rate only.

    Returns:
        (base_tax, marginal_rate_percent)

    Raises:
        InvalidInputError: If the table is empty, unordered or does not end
            with an open band
    """
    _validate_brackets(brackets)

    tax = 0.0
    lower = 0.0
    marginal_rate = brackets[0].rate_percent

    for bracket in brackets:
        if taxable_income <= lower:
            break

        upper = bracket.upper_bound
        top = taxable_income if upper is None else min(taxable_income, upper)
        tax += (top - lower) * bracket.rate_percent / 100
        marginal_rate = bracket.rate_percent

        if upper is None:
            break
        lower = upper

    return tax, marginal_rate


def compute_tax(
    gross_income: float,
    regime: Union[TaxRegime, str],
    deductions: Union[float, Deductions] = 0.0,
) -> TaxResult:
    """
    Calculate income tax, cess and rates for one regime.

    Args:
        gross_income: Annual gross income
        regime: TaxRegime or regime name ("new", "old")
        deductions: Total deduction amount or an itemised Deductions.
            Ignored by regimes that do not allow deductions.

    Returns:
        TaxResult
    """
    if isinstance(regime, str):
        regime = get_regime(regime)
    if isinstance(deductions, Deductions):
        deductions = deductions.total

    if gross_income < 0:
        raise InvalidInputError(f"Income cannot be negative, got {gross_income}")
    if deductions < 0:
        raise InvalidInputError(f"Deductions cannot be negative, got {deductions}")

    if regime.allows_deductions:
        applied_deductions = deductions
        taxable_income = max(gross_income - deductions, 0.0)
    else:
        applied_deductions = 0.0
        taxable_income = gross_income

    base_tax, marginal_rate = calculate_slab_tax(taxable_income, regime.brackets)
    cess = base_tax * regime.cess_rate_percent / 100
    total_tax = base_tax + cess

    effective_rate = total_tax / gross_income * 100 if gross_income > 0 else 0.0

    return TaxResult(
        regime=regime.name,
        gross_income=gross_income,
        deductions=applied_deductions,
        taxable_income=taxable_income,
        base_tax=base_tax,
        cess=cess,
        total_tax=total_tax,
        net_income=gross_income - total_tax,
        effective_rate_percent=effective_rate,
        marginal_rate_percent=marginal_rate,
    )


def compare_regimes(
    gross_income: float,
    deductions: Union[float, Deductions] = 0.0,
    regimes: Optional[List[TaxRegime]] = None,
) -> RegimeComparison:
    """
    Compute the tax under every regime and pick the cheapest.

    Ties go to the regime listed first.
    """
    if regimes is None:
        regimes = list(REGIMES.values())

    results = {r.name: compute_tax(gross_income, r, deductions) for r in regimes}
    ranked = sorted(results.values(), key=lambda res: res.total_tax)
    best = ranked[0]
    worst = ranked[-1]

    return RegimeComparison(
        results=results,
        recommended=best.regime,
        savings=worst.total_tax - best.total_tax,
    )
