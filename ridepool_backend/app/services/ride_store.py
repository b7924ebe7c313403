"""
Ride/booking store access.

Thin query helpers over an AsyncSession. These are the only reads and
writes the inventory and earnings engines perform against the database.
"""

from typing import Iterable, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from ridepool_backend.app.models.ride import Ride
from ridepool_backend.app.models.booking import Booking
from ridepool_backend.app.models.ride_enums import RideStatus, BookingStatus


async def list_rides(
    db: AsyncSession,
    statuses: Iterable[RideStatus],
    driver_id: Optional[int] = None,
    ride_ids: Optional[Sequence[int]] = None,
    newest_first: bool = False,
) -> List[Ride]:
    """
    Select rides by status, optionally narrowed to a driver or explicit ids.

    Args:
        db: Database session
        statuses: Ride statuses to include
        driver_id: Only rides posted by this driver
        ride_ids: Only these rides
        newest_first: Order by last update descending instead of by id

    Returns:
        Matching rides
    """
    stmt = select(Ride).where(Ride.status.in_(list(statuses)))
    if driver_id is not None:
        stmt = stmt.where(Ride.driver_id == driver_id)
    if ride_ids is not None:
        stmt = stmt.where(Ride.id.in_(list(ride_ids)))

    if newest_first:
        stmt = stmt.order_by(Ride.updated_at.desc(), Ride.id.desc())
    else:
        stmt = stmt.order_by(Ride.id)

    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_ride(db: AsyncSession, ride_id: int) -> Optional[Ride]:
    """Load one ride by id, or None."""
    return await db.get(Ride, ride_id)


async def list_bookings(
    db: AsyncSession,
    ride_ids: Sequence[int],
    statuses: Iterable[BookingStatus],
) -> List[Booking]:
    """Load the bookings of one or more rides filtered by status, ordered by id."""
    if not ride_ids:
        return []
    result = await db.execute(
        select(Booking).where(
            Booking.ride_id.in_(list(ride_ids)),
            Booking.status.in_(list(statuses))
        ).order_by(Booking.id)
    )
    return list(result.scalars().all())


async def set_available_seats(db: AsyncSession, ride_id: int, available_seats: int) -> None:
    """
    Point update of a ride's advertised available seats.

    Leaves updated_at as stored; completed rides are ordered by it.
    """
    await db.execute(
        update(Ride)
        .where(Ride.id == ride_id)
        .values(available_seats=available_seats, updated_at=Ride.updated_at)
        .execution_options(synchronize_session=False)
    )
