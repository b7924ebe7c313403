"""
Earnings Schemas.

Money and distance are carried as Decimal so that folds stay exact;
they are rendered as plain JSON numbers.
"""

from decimal import Decimal
from pydantic import BaseModel, Field, PlainSerializer
from datetime import datetime
from typing import Annotated, Optional, List, Dict

from ridepool_backend.app.schemas.inventory import DataIntegrityWarning

Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class RideEarnings(BaseModel):
    """Earnings for a single completed ride."""
    ride_id: int
    driver_id: int
    driver_name: str
    from_city: str
    to_city: str
    completed_at: Optional[datetime] = None
    distance: Amount
    passengers: int
    bookings_count: int
    earnings: Amount
    warnings: List[DataIntegrityWarning] = Field(default_factory=list)


class EarningsTotals(BaseModel):
    """Order-independent fold of a set of ride earnings."""
    total_earnings: Amount = Decimal("0")
    total_rides: int = 0
    total_passengers: int = 0
    total_distance: Amount = Decimal("0")


class DriverTotals(EarningsTotals):
    """Totals for one driver inside a fleet report."""
    driver_id: int
    driver_name: str


class DriverEarningsSummary(EarningsTotals):
    """Earnings overview for a single driver."""
    driver_id: int
    average_per_ride: Amount = Decimal("0.00")
    this_week: Amount = Decimal("0")
    this_month: Amount = Decimal("0")
    by_date: Dict[str, Amount] = Field(default_factory=dict)
    per_ride: List[RideEarnings] = Field(default_factory=list)
    currency: str


class DriverRideCountSummary(BaseModel):
    """Quick count overview for a driver."""
    driver_id: int
    total_rides: int
    this_week_rides: int


class FleetEarningsSummary(EarningsTotals):
    """Earnings across every driver."""
    per_driver: List[DriverTotals] = Field(default_factory=list)
    per_ride: List[RideEarnings] = Field(default_factory=list)
    currency: str
