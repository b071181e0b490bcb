"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.health_routes import router as health_router
from app.api.routes.upload_routes import router as upload_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health_router)
api_router.include_router(upload_router)
