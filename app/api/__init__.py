from fastapi import APIRouter

from .routes import (
    health,
    language,
    passes,
    places,
)

api_router = APIRouter(prefix="/api")

# Health check
api_router.include_router(health.router, tags=["health"])

# Visitor-facing endpoints
api_router.include_router(passes.router, prefix="/pass", tags=["passes"])
api_router.include_router(language.router, prefix="/locale", tags=["locale"])

# Form prefill and admin default place
api_router.include_router(places.router, tags=["places"])
