"""
API routes for the calculator.
"""

from fastapi import APIRouter

from propcalc.api import calculations

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
