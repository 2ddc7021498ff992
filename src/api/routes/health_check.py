"""
Health Check Route

Liveness plus a backing store probe. No authentication.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.depends import SecurityServices, get_services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(services: SecurityServices = Depends(get_services)):
    try:
        store_ok = await services.store.ping()
    except Exception:
        logger.error("Store health probe failed", exc_info=True)
        store_ok = False

    if not store_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "store": "unavailable"},
        )
    return {"status": "healthy", "store": "ok"}
