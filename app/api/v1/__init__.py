"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import auth, credentials, health, resources, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(resources.clients_router, prefix="/clients", tags=["clients"])
router.include_router(resources.resources_router, prefix="/resources", tags=["resources"])
router.include_router(credentials.router, prefix="/credentials", tags=["credentials"])
