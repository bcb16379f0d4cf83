"""
Debt Payoff Calculations

Simulates paying down several debts at once under the standard payoff
strategies:

- minimum:   every debt gets its minimum payment, nothing is reallocated
- snowball:  extra money goes to the smallest balance first
- avalanche: extra money goes to the highest interest rate first

Under snowball and avalanche the household pays a fixed monthly budget
(sum of minimums plus the extra amount). When a debt is cleared its
minimum payment is freed and rolls onto the next debt in the ordering.
"""

import enum
import math
from typing import List, Dict
from dataclasses import dataclass, field

from app.calculations.errors import InvalidInputError

MAX_PAYOFF_MONTHS = 1200  # 100 years


class PayoffStrategy(str, enum.Enum):
    """Debt payoff strategy."""

    minimum = "minimum"
    snowball = "snowball"
    avalanche = "avalanche"


STRATEGY_DESCRIPTIONS = {
    PayoffStrategy.minimum: "Pay only minimum amounts on all debts",
    PayoffStrategy.snowball: "Pay off smallest balances first for psychological wins",
    PayoffStrategy.avalanche: "Pay off highest interest rates first to minimize total interest",
}


@dataclass(frozen=True)
class Debt:
    """An outstanding debt. Never modified by the simulation."""

    id: str
    balance: float
    annual_rate_percent: float
    minimum_payment: float
    name: str = ""

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate_percent / 100 / 12


@dataclass
class PayoffResult:
    """Outcome of paying off a set of debts under one strategy."""

    strategy: PayoffStrategy
    total_interest_paid: float
    months_to_payoff: int
    monthly_outlay: float
    payoff_order: List[str] = field(default_factory=list)
    payoff_months: Dict[str, int] = field(default_factory=dict)


@dataclass
class DebtSummary:
    """Aggregate figures for a list of debts."""

    total_balance: float
    total_minimum_payment: float
    average_interest_rate: float
    count: int


def _validate_debt(debt: Debt) -> None:
    if debt.balance <= 0:
        raise InvalidInputError(f"Debt '{debt.id}' balance must be positive, got {debt.balance}")
    if debt.annual_rate_percent < 0:
        raise InvalidInputError(
            f"Debt '{debt.id}' interest rate cannot be negative, got {debt.annual_rate_percent}"
        )
    if debt.minimum_payment <= 0:
        raise InvalidInputError(
            f"Debt '{debt.id}' minimum payment must be positive, got {debt.minimum_payment}"
        )
    first_interest = debt.balance * debt.monthly_rate
    if debt.minimum_payment <= first_interest:
        raise InvalidInputError(
            f"Debt '{debt.id}' minimum payment {debt.minimum_payment:.2f} does not cover "
            f"the monthly interest of {first_interest:.2f}; it would never be paid off"
        )


def months_to_payoff(balance: float, annual_rate_percent: float, payment: float) -> float:
    """
    Closed-form number of months to clear a single debt with a fixed payment.

        n = -ln(1 - B*r/P) / ln(1 + r)

    With a zero rate this is simply B / P.

    Raises:
        InvalidInputError: If the payment does not exceed the monthly interest
    """
    if balance <= 0:
        return 0.0
    if payment <= 0:
        raise InvalidInputError(f"Payment must be positive, got {payment}")
    if annual_rate_percent < 0:
        raise InvalidInputError(f"Interest rate cannot be negative, got {annual_rate_percent}")

    monthly_rate = annual_rate_percent / 100 / 12

    if monthly_rate == 0:
        return balance / payment

    if payment <= balance * monthly_rate:
        raise InvalidInputError(
            f"Payment {payment:.2f} does not cover the monthly interest of "
            f"{balance * monthly_rate:.2f}; the debt would never be paid off"
        )

    return -math.log(1 - balance * monthly_rate / payment) / math.log(1 + monthly_rate)


def order_debts(debts: List[Debt], strategy: PayoffStrategy) -> List[Debt]:
    """Return debts in the order a strategy targets them (stable sort)."""
    strategy = PayoffStrategy(strategy)

    if strategy == PayoffStrategy.snowball:
        return sorted(debts, key=lambda d: d.balance)
    if strategy == PayoffStrategy.avalanche:
        return sorted(debts, key=lambda d: -d.annual_rate_percent)
    return list(debts)


def simulate(
    debts: List[Debt],
    extra_monthly_budget: float = 0.0,
    strategy: PayoffStrategy = PayoffStrategy.avalanche,
    max_months: int = MAX_PAYOFF_MONTHS,
) -> PayoffResult:
    """
    Simulate month-by-month payoff of all debts under a strategy.

    Each month interest accrues on every open debt, every open debt gets
    its minimum payment (capped at what it owes), then for snowball and
    avalanche the rest of the monthly budget is applied to open debts in
    strategy order. Money left over after clearing one debt flows to the
    next within the same month.

    The minimum strategy ignores ``extra_monthly_budget``.

    Args:
        debts: Debts to pay off
        extra_monthly_budget: Amount available each month beyond the minimums
        strategy: Payoff strategy
        max_months: Simulation cap

    Returns:
        PayoffResult

    Raises:
        InvalidInputError: On invalid debts or a plan that never finishes
    """
    strategy = PayoffStrategy(strategy)

    if extra_monthly_budget < 0:
        raise InvalidInputError(
            f"Extra monthly budget cannot be negative, got {extra_monthly_budget}"
        )

    ids = [d.id for d in debts]
    if len(set(ids)) != len(ids):
        raise InvalidInputError("Debt ids must be unique")

    for debt in debts:
        _validate_debt(debt)

    ordered = order_debts(debts, strategy)
    rollover = strategy != PayoffStrategy.minimum

    total_minimum = sum(d.minimum_payment for d in ordered)
    monthly_outlay = total_minimum + extra_monthly_budget if rollover else total_minimum

    if not ordered:
        return PayoffResult(
            strategy=strategy,
            total_interest_paid=0.0,
            months_to_payoff=0,
            monthly_outlay=0.0,
        )

    balances = {d.id: d.balance for d in ordered}
    payoff_months: Dict[str, int] = {}
    total_interest = 0.0
    month = 0

    while len(payoff_months) < len(ordered):
        month += 1
        if month > max_months:
            raise InvalidInputError(
                f"Debts are not paid off within {max_months} months under the "
                f"{strategy.value} strategy"
            )

        for debt in ordered:
            if balances[debt.id] > 0:
                interest = balances[debt.id] * debt.monthly_rate
                balances[debt.id] += interest
                total_interest += interest

        paid = 0.0
        for debt in ordered:
            if balances[debt.id] > 0:
                payment = min(debt.minimum_payment, balances[debt.id])
                balances[debt.id] -= payment
                paid += payment

        if rollover:
            available = monthly_outlay - paid
            for debt in ordered:
                if available <= 0:
                    break
                if balances[debt.id] > 0:
                    payment = min(available, balances[debt.id])
                    balances[debt.id] -= payment
                    available -= payment

        for debt in ordered:
            if debt.id not in payoff_months and balances[debt.id] <= 0:
                balances[debt.id] = 0.0
                payoff_months[debt.id] = month

    return PayoffResult(
        strategy=strategy,
        total_interest_paid=total_interest,
        months_to_payoff=month,
        monthly_outlay=monthly_outlay,
        payoff_order=sorted(payoff_months, key=lambda debt_id: payoff_months[debt_id]),
        payoff_months=payoff_months,
    )


def compare_strategies(
    debts: List[Debt],
    extra_monthly_budget: float = 0.0,
    max_months: int = MAX_PAYOFF_MONTHS,
) -> List[PayoffResult]:
    """Run every strategy on the same debts."""
    return [
        simulate(debts, extra_monthly_budget, strategy, max_months)
        for strategy in PayoffStrategy
    ]


def summarize_debts(debts: List[Debt]) -> DebtSummary:
    """Total balance, total minimum payment and average rate."""
    count = len(debts)
    return DebtSummary(
        total_balance=sum(d.balance for d in debts),
        total_minimum_payment=sum(d.minimum_payment for d in debts),
        average_interest_rate=(
            sum(d.annual_rate_percent for d in debts) / count if count else 0.0
        ),
        count=count,
    )
