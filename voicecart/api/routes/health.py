"""
Health Check Routes
"""

from fastapi import APIRouter, Depends
from datetime import datetime

from voicecart.adapters.list_store import BaseListStore, StoreError
from voicecart.api.dependencies import get_list_store
from voicecart.config.settings import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@router.get("/ready")
async def readiness_check(store: BaseListStore = Depends(get_list_store)):
    """
    Readiness check - verifies the list store answers
    Suggestions are optional and only reported
    """
    checks = {
        "list_store": False,
        "suggestions": settings.SUGGESTIONS_ENABLED,
        "openai": bool(settings.OPENAI_API_KEY) or settings.SUGGESTION_PROVIDER != "openai"
    }

    try:
        await store.list_items()
        checks["list_store"] = True
    except StoreError as e:
        checks["list_store"] = str(e)

    return {
        "status": "ready" if checks["list_store"] is True else "degraded",
        "store_backend": settings.STORE_BACKEND,
        "checks": checks,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/live")
async def liveness_check():
    """Liveness check - is the service running"""
    return {"status": "alive"}
