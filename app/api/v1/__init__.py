"""
API v1 - image compression endpoints.
"""
from fastapi import APIRouter
from app.api.v1.compress import router as compress_router, legacy_router

router = APIRouter()
router.include_router(compress_router)

__all__ = ['router', 'legacy_router']
