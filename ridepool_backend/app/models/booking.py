"""
Booking database model.

A booking is a rider's claim on one or more seats of a ride.
"""

from sqlalchemy import Column, Integer, ForeignKey, DateTime, Enum
from sqlalchemy.sql import func
from ridepool_backend.app.db.session import Base
from ridepool_backend.app.models.ride_enums import BookingStatus

class Booking(Base):
    """
    Booking model.

    `number_of_seats` is nullable for legacy rows; readers apply their own
    default (see domain.seat_policy).
    """
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    ride_id = Column(Integer, ForeignKey('rides.id'), nullable=False, index=True)
    rider_id = Column(Integer, nullable=False, index=True)

    number_of_seats = Column(Integer, nullable=True)

    status = Column(
        Enum(BookingStatus, name="booking_status", values_callable=lambda e: [m.value for m in e]),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Booking(id={self.id}, ride_id={self.ride_id}, seats={self.number_of_seats}, status='{self.status.value}')>"
