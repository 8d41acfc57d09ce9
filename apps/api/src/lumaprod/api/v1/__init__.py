"""
API v1 router aggregation.

This module combines all v1 API routers into a single router
that is mounted at /api/v1.
"""

from fastapi import APIRouter

from lumaprod.api.v1.content_production import router as content_production_router
from lumaprod.api.v1.creator import router as creator_router
from lumaprod.api.v1.creators import router as creators_router
from lumaprod.api.v1.health import router as health_router
from lumaprod.api.v1.webhooks import router as webhooks_router

api_router = APIRouter()

# Include all routers with their prefixes and tags
api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)
api_router.include_router(
    content_production_router,
    prefix="/content-production",
    tags=["Content Production"],
)
api_router.include_router(
    creators_router,
    prefix="/content-production/creators",
    tags=["Creators"],
)
api_router.include_router(
    creator_router,
    prefix="/creator",
    tags=["Creator"],
)
api_router.include_router(
    webhooks_router,
    prefix="/webhooks",
    tags=["Webhooks"],
)
