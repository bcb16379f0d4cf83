"""
API routes for the finance dashboard.
"""

from fastapi import APIRouter

from app.api import calculations, debts

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(debts.router, prefix="/debts", tags=["debts"])
