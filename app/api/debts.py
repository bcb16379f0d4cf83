"""
Debt planner API endpoints.
"""

import logging
from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel
from typing import Optional, List
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.db.models import Debt, DEBT_TYPES
from app.calculations import debt as payoff
from app.api.calculations import DebtPayoffResponse, run_payoff_plan

logger = logging.getLogger(__name__)

router = APIRouter()


class DebtCreate(BaseModel):
    """Schema for adding a debt."""

    name: str
    debt_type: str = "Other"
    balance: float
    interest_rate: float
    minimum_payment: float
    due_day: int = 1
    priority: Optional[int] = None


class DebtUpdate(BaseModel):
    """Schema for updating a debt."""

    name: Optional[str] = None
    debt_type: Optional[str] = None
    balance: Optional[float] = None
    interest_rate: Optional[float] = None
    minimum_payment: Optional[float] = None
    due_day: Optional[int] = None
    priority: Optional[int] = None


class DebtResponse(BaseModel):
    """Schema for debt response."""

    id: str
    name: str
    debt_type: str
    balance: float
    interest_rate: float
    minimum_payment: float
    due_day: Optional[int]
    priority: int
    months_at_minimum: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True


class DebtListResponse(BaseModel):
    """Saved debts with totals."""

    debts: List[DebtResponse]
    total: int
    total_balance: float
    total_minimum_payment: float
    average_interest_rate: float


def _months_at_minimum(db_debt: Debt) -> Optional[float]:
    """Closed-form payoff time at the minimum payment, None if it never ends."""
    try:
        return payoff.months_to_payoff(
            db_debt.balance, db_debt.interest_rate, db_debt.minimum_payment
        )
    except ValueError:
        return None


def debt_to_response(db_debt: Debt) -> DebtResponse:
    """Convert Debt model to response schema."""
    return DebtResponse(
        id=db_debt.id,
        name=db_debt.name,
        debt_type=db_debt.debt_type or "Other",
        balance=db_debt.balance,
        interest_rate=db_debt.interest_rate,
        minimum_payment=db_debt.minimum_payment,
        due_day=db_debt.due_day,
        priority=db_debt.priority,
        months_at_minimum=_months_at_minimum(db_debt),
        created_at=db_debt.created_at.isoformat() if db_debt.created_at else None,
        updated_at=db_debt.updated_at.isoformat() if db_debt.updated_at else None,
    )


def to_calculation_debt(db_debt: Debt) -> payoff.Debt:
    """Copy a saved debt into the calculator's value type."""
    return payoff.Debt(
        id=db_debt.id,
        name=db_debt.name,
        balance=db_debt.balance,
        annual_rate_percent=db_debt.interest_rate,
        minimum_payment=db_debt.minimum_payment,
    )


def _validate_terms(balance: float, interest_rate: float, minimum_payment: float, due_day):
    if balance <= 0:
        raise HTTPException(status_code=400, detail="Balance must be positive")
    if interest_rate < 0:
        raise HTTPException(status_code=400, detail="Interest rate cannot be negative")
    if minimum_payment <= 0:
        raise HTTPException(status_code=400, detail="Minimum payment must be positive")
    if due_day is not None and not 1 <= due_day <= 31:
        raise HTTPException(status_code=400, detail="Due day must be between 1 and 31")


def _validate_type(debt_type: str):
    if debt_type not in DEBT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown debt type '{debt_type}'. Use one of: {', '.join(DEBT_TYPES)}",
        )


def _active_debts(db: Session):
    return db.query(Debt).filter(Debt.is_deleted == False)


def _get_debt_or_404(db: Session, debt_id: str) -> Debt:
    db_debt = _active_debts(db).filter(Debt.id == debt_id).first()

    if not db_debt:
        raise HTTPException(status_code=404, detail="Debt not found")

    return db_debt


@router.get("/", response_model=DebtListResponse)
async def list_debts(db: Session = Depends(get_db)):
    """List saved debts in priority order."""
    debts = _active_debts(db).order_by(Debt.priority.asc(), Debt.created_at.asc()).all()
    summary = payoff.summarize_debts([to_calculation_debt(d) for d in debts])

    return DebtListResponse(
        debts=[debt_to_response(d) for d in debts],
        total=summary.count,
        total_balance=summary.total_balance,
        total_minimum_payment=summary.total_minimum_payment,
        average_interest_rate=summary.average_interest_rate,
    )


@router.post("/", response_model=DebtResponse, status_code=201)
async def create_debt(
    debt_data: DebtCreate,
    db: Session = Depends(get_db),
):
    """Add a debt. New debts go to the end of the priority list by default."""
    _validate_type(debt_data.debt_type)
    _validate_terms(
        debt_data.balance,
        debt_data.interest_rate,
        debt_data.minimum_payment,
        debt_data.due_day,
    )

    priority = debt_data.priority
    if priority is None:
        priority = _active_debts(db).count() + 1

    db_debt = Debt(
        name=debt_data.name,
        debt_type=debt_data.debt_type,
        balance=debt_data.balance,
        interest_rate=debt_data.interest_rate,
        minimum_payment=debt_data.minimum_payment,
        due_day=debt_data.due_day,
        priority=priority,
    )

    db.add(db_debt)
    db.commit()
    db.refresh(db_debt)

    logger.info(f"Added debt {db_debt.id} ({db_debt.name})")

    return debt_to_response(db_debt)


@router.get("/plan", response_model=DebtPayoffResponse)
async def plan_payoff(
    extra_payment: float = 0.0,
    strategy: Optional[payoff.PayoffStrategy] = None,
    db: Session = Depends(get_db),
):
    """Run the payoff simulator on the saved debts."""
    debts = _active_debts(db).order_by(Debt.priority.asc(), Debt.created_at.asc()).all()

    return run_payoff_plan(
        [to_calculation_debt(d) for d in debts],
        extra_payment,
        strategy,
    )


@router.get("/{debt_id}", response_model=DebtResponse)
async def get_debt(
    debt_id: str,
    db: Session = Depends(get_db),
):
    """Get a debt by ID."""
    return debt_to_response(_get_debt_or_404(db, debt_id))


@router.put("/{debt_id}", response_model=DebtResponse)
async def update_debt(
    debt_id: str,
    debt_data: DebtUpdate,
    db: Session = Depends(get_db),
):
    """Update a debt, e.g. a new balance or a changed priority."""
    db_debt = _get_debt_or_404(db, debt_id)

    # Update only provided fields
    update_data = debt_data.model_dump(exclude_unset=True, exclude_none=True)
    if "debt_type" in update_data:
        _validate_type(update_data["debt_type"])
    _validate_terms(
        update_data.get("balance", db_debt.balance),
        update_data.get("interest_rate", db_debt.interest_rate),
        update_data.get("minimum_payment", db_debt.minimum_payment),
        update_data.get("due_day", db_debt.due_day),
    )

    for field, value in update_data.items():
        setattr(db_debt, field, value)

    db.commit()
    db.refresh(db_debt)

    logger.info(f"Updated debt {debt_id}: {', '.join(sorted(update_data))}")

    return debt_to_response(db_debt)


@router.delete("/{debt_id}")
async def delete_debt(
    debt_id: str,
    db: Session = Depends(get_db),
):
    """Soft delete a debt."""
    db_debt = _get_debt_or_404(db, debt_id)

    db_debt.is_deleted = True
    db.commit()

    logger.info(f"Deleted debt {debt_id}")

    return {"deleted": True, "id": debt_id}
