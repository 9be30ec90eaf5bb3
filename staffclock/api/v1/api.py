"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from staffclock.api.v1.endpoints import admin, attendance, auth, employees, health, settings

api_router = APIRouter()

# Auth (login, refresh, user management)
api_router.include_router(auth.router)

# Employee profiles
api_router.include_router(employees.router)

# Check-in / check-out, listings, summaries
api_router.include_router(attendance.router)

# Adjustment and monthly report
api_router.include_router(admin.router)

# Shift window
api_router.include_router(settings.router)

api_router.include_router(health.router)
