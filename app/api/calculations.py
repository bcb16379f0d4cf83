"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results.
Called by the calculator pages on every input change.
"""

import logging
from dataclasses import asdict
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date

from app.config import get_settings
from app.calculations import amortization, deposit, tax, debt

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


def _bad_request(calculator: str, error: ValueError) -> HTTPException:
    logger.warning(f"Rejected {calculator} input: {error}")
    return HTTPException(status_code=400, detail=str(error))


# ============================================================================
# EMI
# ============================================================================


class EMIInput(BaseModel):
    """Input for EMI calculation."""

    principal: float
    annual_rate: float  # percent
    tenure_years: float
    start_date: Optional[date] = None
    include_yearly: bool = False


class EMIResponse(BaseModel):
    """EMI summary with the repayment schedule."""

    emi: float
    total_payment: float
    total_interest: float
    principal_share_percent: float
    interest_share_percent: float
    schedule: List[dict]
    yearly: Optional[List[dict]] = None


@router.post("/emi", response_model=EMIResponse)
async def calculate_emi(inputs: EMIInput):
    """Calculate EMI and the amortization schedule for a loan."""
    loan = amortization.LoanInput(
        principal=inputs.principal,
        annual_rate_percent=inputs.annual_rate,
        tenure_years=inputs.tenure_years,
    )

    try:
        result = amortization.compute_amortization(loan, start_date=inputs.start_date)
    except ValueError as e:
        raise _bad_request("EMI", e)

    yearly = amortization.annualize_schedule(result.schedule) if inputs.include_yearly else None

    return EMIResponse(
        emi=result.emi,
        total_payment=result.total_payment,
        total_interest=result.total_interest,
        principal_share_percent=result.principal_share_percent,
        interest_share_percent=result.interest_share_percent,
        schedule=[asdict(entry) for entry in result.schedule],
        yearly=yearly,
    )


@router.get("/emi/presets")
async def list_loan_presets():
    """Default interest rates per loan type."""
    return {"presets": amortization.LOAN_PRESETS}


# ============================================================================
# FIXED DEPOSIT
# ============================================================================


class DepositRequest(BaseModel):
    """Input for fixed deposit calculation."""

    principal: float
    annual_rate: float  # percent
    years: float
    compounding_frequency: int = 4


class DepositResponse(BaseModel):
    """Maturity figures, yearly growth and simple-interest comparison."""

    maturity_amount: float
    total_interest: float
    effective_annual_rate: float
    yearly_breakdown: List[dict]
    comparison: dict


@router.post("/deposit", response_model=DepositResponse)
async def calculate_deposit(inputs: DepositRequest):
    """Calculate fixed deposit maturity value."""
    fd = deposit.DepositInput(
        principal=inputs.principal,
        annual_rate_percent=inputs.annual_rate,
        years=inputs.years,
        compounding_periods_per_year=inputs.compounding_frequency,
    )

    try:
        result = deposit.compute_deposit(fd)
        breakdown = deposit.yearly_breakdown(fd)
        comparison = deposit.compare_simple_compound(fd)
    except ValueError as e:
        raise _bad_request("deposit", e)

    return DepositResponse(
        maturity_amount=result.maturity_amount,
        total_interest=result.total_interest,
        effective_annual_rate=result.effective_annual_rate_percent,
        yearly_breakdown=[asdict(row) for row in breakdown],
        comparison=asdict(comparison),
    )


# ============================================================================
# INCOME TAX
# ============================================================================


class DeductionsInput(BaseModel):
    """Itemised deductions (old regime only)."""

    section_80c: float = 0.0
    section_80d: float = 0.0
    section_24b: float = 0.0
    nps: float = 0.0


class TaxInput(BaseModel):
    """Input for income tax calculation."""

    gross_income: float
    regime: str = settings.default_tax_regime
    deductions: DeductionsInput = Field(default_factory=DeductionsInput)


class TaxResponse(BaseModel):
    """Tax computed under one regime."""

    regime: str
    gross_income: float
    deductions: float
    taxable_income: float
    base_tax: float
    cess: float
    total_tax: float
    net_income: float
    effective_rate: float
    marginal_rate: float


def _tax_response(result: tax.TaxResult) -> TaxResponse:
    return TaxResponse(
        regime=result.regime,
        gross_income=result.gross_income,
        deductions=result.deductions,
        taxable_income=result.taxable_income,
        base_tax=result.base_tax,
        cess=result.cess,
        total_tax=result.total_tax,
        net_income=result.net_income,
        effective_rate=result.effective_rate_percent,
        marginal_rate=result.marginal_rate_percent,
    )


@router.post("/tax", response_model=TaxResponse)
async def calculate_tax(inputs: TaxInput):
    """Calculate income tax under the selected regime."""
    try:
        result = tax.compute_tax(
            inputs.gross_income,
            inputs.regime,
            tax.Deductions(**inputs.deductions.model_dump()),
        )
    except ValueError as e:
        raise _bad_request("tax", e)

    return _tax_response(result)


class TaxComparisonResponse(BaseModel):
    """Both regimes side by side."""

    regimes: List[TaxResponse]
    recommended: str
    savings: float


@router.post("/tax/compare", response_model=TaxComparisonResponse)
async def compare_tax_regimes(inputs: TaxInput):
    """Compare tax under every regime for the same income."""
    try:
        comparison = tax.compare_regimes(
            inputs.gross_income,
            tax.Deductions(**inputs.deductions.model_dump()),
        )
    except ValueError as e:
        raise _bad_request("tax", e)

    return TaxComparisonResponse(
        regimes=[_tax_response(r) for r in comparison.results.values()],
        recommended=comparison.recommended,
        savings=comparison.savings,
    )


@router.get("/tax/regimes")
async def list_tax_regimes():
    """Slab tables for every regime. The top band has upper_bound null."""
    return {
        "regimes": [
            {
                "name": regime.name,
                "description": regime.description,
                "cess_rate": regime.cess_rate_percent,
                "allows_deductions": regime.allows_deductions,
                "brackets": [
                    {"upper_bound": b.upper_bound, "rate": b.rate_percent}
                    for b in regime.brackets
                ],
            }
            for regime in tax.REGIMES.values()
        ]
    }


# ============================================================================
# DEBT PAYOFF
# ============================================================================


class DebtInput(BaseModel):
    """A debt submitted for payoff planning."""

    id: str
    name: str = ""
    balance: float
    interest_rate: float  # percent
    minimum_payment: float


class DebtPayoffInput(BaseModel):
    """Input for debt payoff simulation."""

    debts: List[DebtInput]
    extra_payment: float = 0.0
    strategy: Optional[debt.PayoffStrategy] = None


class PayoffStrategyResponse(BaseModel):
    """Outcome of one payoff strategy."""

    strategy: str
    description: str
    total_interest: float
    payoff_months: int
    monthly_payment: float
    payoff_order: List[str]
    debt_payoff_months: dict


class DebtPayoffResponse(BaseModel):
    """Payoff outcomes for the requested strategies."""

    strategies: List[PayoffStrategyResponse]


def payoff_to_response(result: debt.PayoffResult) -> PayoffStrategyResponse:
    """Convert a PayoffResult to the response schema."""
    return PayoffStrategyResponse(
        strategy=result.strategy.value,
        description=debt.STRATEGY_DESCRIPTIONS[result.strategy],
        total_interest=result.total_interest_paid,
        payoff_months=result.months_to_payoff,
        monthly_payment=result.monthly_outlay,
        payoff_order=result.payoff_order,
        debt_payoff_months=result.payoff_months,
    )


def run_payoff_plan(
    debts: List[debt.Debt],
    extra_payment: float,
    strategy: Optional[debt.PayoffStrategy],
) -> DebtPayoffResponse:
    """Run one strategy, or all of them when none is given."""
    try:
        if strategy is None:
            results = debt.compare_strategies(
                debts, extra_payment, max_months=settings.max_payoff_months
            )
        else:
            results = [
                debt.simulate(
                    debts, extra_payment, strategy, max_months=settings.max_payoff_months
                )
            ]
    except ValueError as e:
        raise _bad_request("debt payoff", e)

    return DebtPayoffResponse(strategies=[payoff_to_response(r) for r in results])


@router.post("/debt-payoff", response_model=DebtPayoffResponse)
async def calculate_debt_payoff(inputs: DebtPayoffInput):
    """Simulate paying off the given debts."""
    debts = [
        debt.Debt(
            id=d.id,
            name=d.name,
            balance=d.balance,
            annual_rate_percent=d.interest_rate,
            minimum_payment=d.minimum_payment,
        )
        for d in inputs.debts
    ]

    return run_payoff_plan(debts, inputs.extra_payment, inputs.strategy)
