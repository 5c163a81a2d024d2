"""
API v1 Router

Report trigger endpoints.
"""

from fastapi import APIRouter

from market_digest.api.v1.endpoints import report

router = APIRouter()

router.include_router(report.router, prefix="/report", tags=["Daily Report"])
