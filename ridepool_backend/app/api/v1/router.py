"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from ridepool_backend.app.api.v1.endpoints import earnings, inventory

router = APIRouter()

# Earnings reports
router.include_router(earnings.router)

# Seat inventory maintenance
router.include_router(inventory.router)
