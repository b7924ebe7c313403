"""
Ride database model.

A ride is posted by a driver with a fixed seat capacity. Its advertised
available seats are mutated by the booking flow and corrected by the
seat inventory reconciler.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from sqlalchemy.sql import func
from ridepool_backend.app.db.session import Base
from ridepool_backend.app.models.ride_enums import RideStatus

class Ride(Base):
    """
    Ride model.

    `available_seats` is expected to equal `total_seats` minus the seats held
    by pending and confirmed bookings, but may drift and is allowed to go
    negative when a ride was oversold.
    """
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Driver (owned by the accounts service, denormalized for reporting)
    driver_id = Column(Integer, nullable=False, index=True)
    driver_name = Column(String(200), nullable=False, default="")

    # Route
    from_city = Column(String(200), nullable=False)
    to_city = Column(String(200), nullable=False)
    distance = Column(Float, nullable=True)  # km

    # Capacity
    total_seats = Column(Integer, nullable=False)
    available_seats = Column(Integer, nullable=False)

    # Status
    status = Column(
        Enum(RideStatus, name="ride_status", values_callable=lambda e: [m.value for m in e]),
        default=RideStatus.SCHEDULED,
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Ride(id={self.id}, driver_id={self.driver_id}, status='{self.status.value}')>"
