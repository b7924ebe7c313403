"""
Ride and booking lifecycle enumerations.
"""

import enum


class RideStatus(str, enum.Enum):
    """Ride status enumeration."""
    SCHEDULED = "scheduled"  # Posted by the driver, open for bookings
    IN_PROGRESS = "in-progress"  # Driver has started the ride
    COMPLETED = "completed"  # Ride finished, earnings are owed
    CANCELLED = "cancelled"  # Ride called off

    @property
    def is_terminal(self) -> bool:
        return self in (RideStatus.COMPLETED, RideStatus.CANCELLED)

    def can_transition_to(self, target: "RideStatus") -> bool:
        return target in RIDE_TRANSITIONS[self]


class BookingStatus(str, enum.Enum):
    """Booking status enumeration."""
    PENDING = "pending"  # Requested by the rider, awaiting driver decision
    CONFIRMED = "confirmed"  # Accepted by the driver
    COMPLETED = "completed"  # Rider was carried
    CANCELLED = "cancelled"  # Withdrawn by either side

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)

    def can_transition_to(self, target: "BookingStatus") -> bool:
        return target in BOOKING_TRANSITIONS[self]


RIDE_TRANSITIONS = {
    RideStatus.SCHEDULED: {RideStatus.IN_PROGRESS, RideStatus.CANCELLED},
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED, RideStatus.CANCELLED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}

BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

# Bookings that hold seats on a ride
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)

# Bookings the driver is paid for
ELIGIBLE_BOOKING_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)

# Rides whose seat inventory is still live
RECONCILABLE_RIDE_STATUSES = (RideStatus.SCHEDULED, RideStatus.IN_PROGRESS)
