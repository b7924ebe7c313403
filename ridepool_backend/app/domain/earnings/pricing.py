"""
Pricing policy and per-ride earnings calculation.

Everything here is pure: no I/O, no clock, no session. Given the same ride,
bookings and policy the result is identical on every call.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict

from ridepool_backend.app.core.config import settings
from ridepool_backend.app.domain.seat_policy import WarningCode, invalid_seats_warning, passenger_seats
from ridepool_backend.app.models.booking import Booking
from ridepool_backend.app.models.ride import Ride
from ridepool_backend.app.models.ride_enums import ELIGIBLE_BOOKING_STATUSES
from ridepool_backend.app.schemas.earnings import RideEarnings
from ridepool_backend.app.schemas.inventory import DataIntegrityWarning

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Convert a stored float to Decimal through its shortest repr."""
    return Decimal(str(value))


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class PricingPolicy(BaseModel):
    """Rates applied to completed rides."""
    model_config = ConfigDict(frozen=True)

    price_per_km: Decimal
    price_per_seat: Decimal
    currency: str = "USD"

    @classmethod
    def from_settings(cls) -> "PricingPolicy":
        return cls(
            price_per_km=to_decimal(settings.price_per_km),
            price_per_seat=to_decimal(settings.price_per_seat),
            currency=settings.currency,
        )


def ride_distance(ride: Ride) -> Tuple[Decimal, Optional[DataIntegrityWarning]]:
    """Billable distance of a ride; missing counts as zero, negative is reported and ignored."""
    if ride.distance is None:
        return ZERO, None
    distance = to_decimal(ride.distance)
    if distance < 0:
        return ZERO, DataIntegrityWarning(
            code=WarningCode.NEGATIVE_DISTANCE,
            message=f"Ride {ride.id} has negative distance {ride.distance}",
            ride_id=ride.id,
        )
    return distance, None


def compute_ride_earnings(
    ride: Ride,
    bookings: Iterable[Booking],
    pricing: PricingPolicy,
) -> RideEarnings:
    """
    Compute what the driver earned for one completed ride.

    earnings = distance * price_per_km + passengers * price_per_seat,
    rounded half-up to cents. Bookings outside confirmed/completed are
    ignored, so callers may pass an unfiltered list.

    Args:
        ride: The completed ride
        bookings: Bookings on that ride
        pricing: Rates to apply

    Returns:
        RideEarnings with any data integrity warnings attached
    """
    warnings: List[DataIntegrityWarning] = []

    distance, distance_warning = ride_distance(ride)
    if distance_warning:
        warnings.append(distance_warning)

    passengers = 0
    bookings_count = 0
    for booking in bookings:
        if booking.ride_id != ride.id or booking.status not in ELIGIBLE_BOOKING_STATUSES:
            continue
        bookings_count += 1
        passengers += passenger_seats(booking.number_of_seats)
        seats_warning = invalid_seats_warning(ride.id, booking)
        if seats_warning:
            warnings.append(seats_warning)

    earnings = to_cents(distance * pricing.price_per_km + passengers * pricing.price_per_seat)

    return RideEarnings(
        ride_id=ride.id,
        driver_id=ride.driver_id,
        driver_name=ride.driver_name or "",
        from_city=ride.from_city,
        to_city=ride.to_city,
        completed_at=ride.updated_at,
        distance=distance,
        passengers=passengers,
        bookings_count=bookings_count,
        earnings=earnings,
        warnings=warnings,
    )
