"""
Seat Inventory Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from ridepool_backend.app.models.ride_enums import RideStatus


class DataIntegrityWarning(BaseModel):
    """A derived value that fell outside its expected domain."""
    code: str
    message: str
    ride_id: int
    booking_id: Optional[int] = None


class ReconcileRequest(BaseModel):
    """Selection scope for a reconciliation pass."""
    statuses: List[RideStatus] = Field(default_factory=lambda: [RideStatus.SCHEDULED], min_length=1)
    driver_id: Optional[int] = None
    ride_ids: Optional[List[int]] = None
    dry_run: bool = False


class RideReconciliation(BaseModel):
    """Outcome for one ride of a reconciliation pass."""
    ride_id: int
    total_seats: Optional[int] = None
    consumed_seats: Optional[int] = None
    active_bookings: int = 0
    old_available: Optional[int] = None
    new_available: Optional[int] = None
    corrected: bool = False
    warnings: List[DataIntegrityWarning] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def oversold(self) -> bool:
        return self.new_available is not None and self.new_available < 0


class ReconciliationReport(BaseModel):
    """Summary of a full reconciliation pass."""
    statuses: List[RideStatus]
    dry_run: bool
    inspected: int
    corrected: int
    failed: int
    oversold: int
    rides: List[RideReconciliation]
    started_at: datetime
    finished_at: datetime
