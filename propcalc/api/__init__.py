"""
API routes for the deal calculator.
"""

from fastapi import APIRouter

from propcalc.api import calculations, calculator

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(calculator.router, prefix="/calculator", tags=["calculator"])
