from fastapi import APIRouter

from provider_validation.api.v1.endpoints import providers

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(providers.router, prefix="/providers", tags=["Providers"])

__all__ = ["api_router"]
