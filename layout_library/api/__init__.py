"""JSON API routes (mounted under <API_PREFIX>/api)."""

from fastapi import APIRouter

from layout_library.api import auth, downloads, health, layouts

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(layouts.router, tags=["layouts"])
router.include_router(downloads.router, prefix="/download", tags=["download"])
