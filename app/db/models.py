"""
SQLAlchemy ORM models for the debt planner.
"""

from datetime import datetime
from sqlalchemy import Column, String, Float, Integer, Boolean, DateTime
from sqlalchemy.orm import declarative_base
import uuid

Base = declarative_base()

DEBT_TYPES = [
    "Credit Card",
    "Personal Loan",
    "Home Loan",
    "Car Loan",
    "Student Loan",
    "Business Loan",
    "Other",
]


def generate_uuid():
    return str(uuid.uuid4())


class AuditMixin:
    """Mixin for audit fields on all models."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
    is_deleted = Column(Boolean, default=False, nullable=False)


class Debt(AuditMixin, Base):
    """A debt tracked in the debt planner."""

    __tablename__ = "debts"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    debt_type = Column(String(50), default="Other", nullable=False)

    # Terms
    balance = Column(Float, nullable=False)
    interest_rate = Column(Float, nullable=False)  # Annual, percent (18.0 = 18%)
    minimum_payment = Column(Float, nullable=False)
    due_day = Column(Integer, default=1)  # Day of month

    # Lower number = listed (and paid under the minimum strategy) first
    priority = Column(Integer, default=0, nullable=False)
