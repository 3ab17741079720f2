"""Version 1 API routers."""

from fastapi import APIRouter

from .friends import router as friends_router
from .health import router as health_router
from .recipients import router as recipients_router
from .relationships import router as relationships_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(friends_router, prefix="/user")
api_router.include_router(relationships_router, prefix="/user")
api_router.include_router(recipients_router, prefix="/user")

__all__ = ["api_router"]
