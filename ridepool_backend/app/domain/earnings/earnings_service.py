"""
Earnings Service (Domain Logic).

Computes driver earnings for completed rides at ride, driver and fleet
granularity. Read-only: no ride or booking is ever modified here.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ridepool_backend.app.core.exceptions import (
    RideNotCompletedError,
    RideNotFoundError,
    StoreFailureError,
)
from ridepool_backend.app.domain.earnings.aggregation import (
    average_per_ride,
    earnings_by_date,
    earnings_since,
    fold_by_driver,
    fold_earnings,
    month_start,
    naive_utc,
    week_start,
)
from ridepool_backend.app.domain.earnings.pricing import PricingPolicy, compute_ride_earnings
from ridepool_backend.app.models.booking import Booking
from ridepool_backend.app.models.ride_enums import ELIGIBLE_BOOKING_STATUSES, RideStatus
from ridepool_backend.app.schemas.earnings import (
    DriverEarningsSummary,
    DriverRideCountSummary,
    FleetEarningsSummary,
    RideEarnings,
)
from ridepool_backend.app.services import ride_store

logger = logging.getLogger("ridepool.earnings")


class EarningsService:

    @staticmethod
    async def get_ride_earnings(
        db: AsyncSession,
        ride_id: int,
        pricing: Optional[PricingPolicy] = None,
    ) -> RideEarnings:
        """
        Earnings for a single completed ride.

        Raises:
            RideNotFoundError: No ride with this id
            RideNotCompletedError: Ride exists but has not completed
            StoreFailureError: Ride or bookings could not be read
        """
        pricing = pricing or PricingPolicy.from_settings()
        try:
            ride = await ride_store.get_ride(db, ride_id)
            if ride is None:
                raise RideNotFoundError(ride_id)
            if ride.status != RideStatus.COMPLETED:
                raise RideNotCompletedError(ride_id, RideStatus(ride.status).value)
            bookings = await ride_store.list_bookings(db, [ride.id], ELIGIBLE_BOOKING_STATUSES)
        except SQLAlchemyError as exc:
            raise StoreFailureError("ride earnings lookup", exc) from exc

        result = compute_ride_earnings(ride, bookings, pricing)
        _log_warnings(result)
        return result

    @staticmethod
    async def get_driver_earnings(
        db: AsyncSession,
        driver_id: int,
        pricing: Optional[PricingPolicy] = None,
        now: Optional[datetime] = None,
    ) -> DriverEarningsSummary:
        """
        Earnings overview for one driver.

        A driver without completed rides gets an all-zero summary.
        `per_ride` is ordered most recently completed first.
        """
        pricing = pricing or PricingPolicy.from_settings()
        now = now or datetime.utcnow()

        per_ride = await _completed_ride_earnings(db, pricing, driver_id=driver_id)
        totals = fold_earnings(per_ride)

        logger.info(
            "Driver earnings computed",
            extra={"driver_id": driver_id, "rides": totals.total_rides, "total": str(totals.total_earnings)}
        )

        return DriverEarningsSummary(
            driver_id=driver_id,
            **totals.model_dump(),
            average_per_ride=average_per_ride(totals),
            this_week=earnings_since(per_ride, week_start(now)),
            this_month=earnings_since(per_ride, month_start(now)),
            by_date=earnings_by_date(per_ride),
            per_ride=per_ride,
            currency=pricing.currency,
        )

    @staticmethod
    async def get_fleet_earnings(
        db: AsyncSession,
        pricing: Optional[PricingPolicy] = None,
    ) -> FleetEarningsSummary:
        """Earnings across every completed ride of every driver."""
        pricing = pricing or PricingPolicy.from_settings()

        per_ride = await _completed_ride_earnings(db, pricing)
        totals = fold_earnings(per_ride)

        logger.info(
            "Fleet earnings computed",
            extra={"rides": totals.total_rides, "total": str(totals.total_earnings)}
        )

        return FleetEarningsSummary(
            **totals.model_dump(),
            per_driver=fold_by_driver(per_ride),
            per_ride=per_ride,
            currency=pricing.currency,
        )

    @staticmethod
    async def get_driver_summary(
        db: AsyncSession,
        driver_id: int,
        now: Optional[datetime] = None,
    ) -> DriverRideCountSummary:
        """Completed ride counts for a driver, overall and for the last 7 days."""
        now = now or datetime.utcnow()
        try:
            rides = await ride_store.list_rides(db, [RideStatus.COMPLETED], driver_id=driver_id)
        except SQLAlchemyError as exc:
            raise StoreFailureError("driver ride count", exc) from exc

        since = week_start(now)
        this_week = [
            r for r in rides
            if r.updated_at is not None and naive_utc(r.updated_at) >= naive_utc(since)
        ]
        return DriverRideCountSummary(
            driver_id=driver_id,
            total_rides=len(rides),
            this_week_rides=len(this_week),
        )


async def _completed_ride_earnings(
    db: AsyncSession,
    pricing: PricingPolicy,
    driver_id: Optional[int] = None,
) -> List[RideEarnings]:
    try:
        rides = await ride_store.list_rides(
            db, [RideStatus.COMPLETED], driver_id=driver_id, newest_first=True
        )
        bookings = await ride_store.list_bookings(db, [r.id for r in rides], ELIGIBLE_BOOKING_STATUSES)
    except SQLAlchemyError as exc:
        raise StoreFailureError("completed ride scan", exc) from exc

    by_ride = _group_bookings(bookings)
    results = [compute_ride_earnings(ride, by_ride.get(ride.id, ()), pricing) for ride in rides]
    for result in results:
        _log_warnings(result)
    return results


def _group_bookings(bookings: Sequence[Booking]) -> Dict[int, List[Booking]]:
    grouped: Dict[int, List[Booking]] = {}
    for booking in bookings:
        grouped.setdefault(booking.ride_id, []).append(booking)
    return grouped


def _log_warnings(result: RideEarnings) -> None:
    for warning in result.warnings:
        logger.warning(
            warning.message,
            extra={"code": warning.code, "ride_id": warning.ride_id, "booking_id": warning.booking_id}
        )
