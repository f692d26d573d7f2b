from fastapi import APIRouter

from abadvisor.api.v1 import decisions, health, reports

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(decisions.router, prefix="/decisions", tags=["decisions"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
