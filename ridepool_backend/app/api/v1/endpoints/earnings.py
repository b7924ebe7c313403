"""
Earnings API Endpoints.

Read-only earnings reports for single rides, drivers and the whole fleet.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from ridepool_backend.app.db.session import get_db
from ridepool_backend.app.domain.earnings.earnings_service import EarningsService
from ridepool_backend.app.schemas.earnings import (
    DriverEarningsSummary,
    DriverRideCountSummary,
    FleetEarningsSummary,
    RideEarnings,
)

router = APIRouter(prefix="/earnings", tags=["Earnings"])


@router.get("/rides/{ride_id}", response_model=RideEarnings)
async def get_ride_earnings(
    ride_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db)
):
    """Get earnings for one completed ride. 404 if missing, 409 if not completed."""
    return await EarningsService.get_ride_earnings(db, ride_id)


@router.get("/drivers/{driver_id}", response_model=DriverEarningsSummary)
async def get_driver_earnings(
    driver_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the earnings overview for a driver.

    Drivers with no completed rides receive a zero-valued summary.
    """
    return await EarningsService.get_driver_earnings(db, driver_id)


@router.get("/drivers/{driver_id}/summary", response_model=DriverRideCountSummary)
async def get_driver_earnings_summary(
    driver_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db)
):
    """Get completed ride counts for a driver."""
    return await EarningsService.get_driver_summary(db, driver_id)


@router.get("/fleet", response_model=FleetEarningsSummary)
async def get_fleet_earnings(db: AsyncSession = Depends(get_db)):
    """Get earnings across all drivers."""
    return await EarningsService.get_fleet_earnings(db)
