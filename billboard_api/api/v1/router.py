"""
Main API router for v1 endpoints.
"""

from fastapi import APIRouter

from billboard_api.api.v1.endpoints import admin, auth, billboards, bookings, complaints, health, users

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(billboards.router, prefix="/billboards", tags=["billboards"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(complaints.router, prefix="/complaints", tags=["complaints"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
