"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from listingboard.api.routes.auth_routes import router as auth_router
from listingboard.api.routes.listing_routes import router as listing_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(listing_router)
