"""
API routes
"""
from fastapi import APIRouter

from adwarden.api.routes import auth, extension, health, realtime

api_router = APIRouter(prefix="/api")

# Include routers
api_router.include_router(auth.router)
api_router.include_router(health.router)
api_router.include_router(extension.router)
api_router.include_router(realtime.router)
