"""
API routes for the calculation kernel.
"""

from fastapi import APIRouter

from finkernel.api import calculations

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
