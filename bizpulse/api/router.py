"""
API Router — Combines all endpoint groups.

Insights:   /api/v1/insights/{analyze,analyze-rows,trend,domain,domains,health}
"""

from fastapi import APIRouter

from bizpulse.api.v1.insights import router as insights_router

api_router = APIRouter()

api_router.include_router(
    insights_router,
    prefix="/insights",
    tags=["Business Insights"],
)
