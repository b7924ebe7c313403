"""
Booking seat-count defaults and data integrity warnings.

A booking with no seat count holds no ride capacity but is still paid as
one passenger.
"""

from typing import Optional

from ridepool_backend.app.models.booking import Booking
from ridepool_backend.app.schemas.inventory import DataIntegrityWarning


class WarningCode:
    """Data integrity warning codes."""
    OVERSOLD_RIDE = "OVERSOLD_RIDE"
    NEGATIVE_DISTANCE = "NEGATIVE_DISTANCE"
    INVALID_BOOKING_SEATS = "INVALID_BOOKING_SEATS"


def capacity_seats(number_of_seats: Optional[int]) -> int:
    """Seats a booking consumes from ride capacity (missing, zero or negative -> 0)."""
    if not number_of_seats or number_of_seats < 0:
        return 0
    return number_of_seats


def passenger_seats(number_of_seats: Optional[int]) -> int:
    """Passengers a booking is paid for (missing, zero or negative -> 1)."""
    if not number_of_seats or number_of_seats < 0:
        return 1
    return number_of_seats


def invalid_seats_warning(ride_id: int, booking: Booking) -> Optional[DataIntegrityWarning]:
    """Report a booking whose stored seat count is zero or below."""
    if booking.number_of_seats is not None and booking.number_of_seats <= 0:
        return DataIntegrityWarning(
            code=WarningCode.INVALID_BOOKING_SEATS,
            message=f"Booking {booking.id} has seat count {booking.number_of_seats}",
            ride_id=ride_id,
            booking_id=booking.id,
        )
    return None
