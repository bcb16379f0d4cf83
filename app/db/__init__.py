"""
Database configuration and models.
"""

from app.db.database import engine, SessionLocal, get_db, init_db
from app.db.models import Base, Debt

__all__ = ["engine", "SessionLocal", "get_db", "init_db", "Base", "Debt"]
