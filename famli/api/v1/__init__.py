"""API v1 routes."""

from fastapi import APIRouter

from famli.api.v1 import auth, config, health, households, people, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(households.router, prefix="/households", tags=["households"])
router.include_router(people.router, prefix="/people", tags=["people"])
router.include_router(config.router, prefix="/config", tags=["config"])
