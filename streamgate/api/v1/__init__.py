"""API v1 routes."""

from fastapi import APIRouter

from streamgate.api.v1 import auth, health, roles, subscriptions

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(roles.router, prefix="/roles", tags=["roles"])
router.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])
