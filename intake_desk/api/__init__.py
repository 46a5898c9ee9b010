"""API routes for the IntakeDesk gateway."""

from fastapi import APIRouter

from .auth import router as auth_router
from .entities import router as entities_router
from .functions import router as functions_router
from .upload import router as upload_router

# Main API router
api_router = APIRouter()

# Fixed paths first: the entity routes match any "/{name}/{id}" pair.
api_router.include_router(auth_router)
api_router.include_router(functions_router)
api_router.include_router(upload_router)
api_router.include_router(entities_router)

__all__ = ["api_router"]
