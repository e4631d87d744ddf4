"""Master API router mounted at /api/v1."""

from fastapi import APIRouter

from payrail.api.routes import custody_webhook, health, offramp_webhook

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(custody_webhook.router, tags=["Webhooks"])
api_router.include_router(offramp_webhook.router, tags=["Webhooks"])
