from fastapi import APIRouter

from abadvisor.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    settings = get_settings()
    return {"status": "healthy", "service": "ab-test-advisor", "environment": settings.ENVIRONMENT}
