"""
Seat Inventory Reconciler (Domain Logic).

Detects and corrects drift between a ride's stored available seats and the
value implied by its pending and confirmed bookings.

Each ride is a separate unit of work with its own session and transaction,
so a store failure on one ride never rolls back or aborts another. Passes
are idempotent: re-running without booking changes performs no writes.
"""

import asyncio
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ridepool_backend.app.core.config import settings
from ridepool_backend.app.core.exceptions import InvalidReconcileScopeError, StoreFailureError
from ridepool_backend.app.domain.seat_policy import (
    WarningCode,
    capacity_seats,
    invalid_seats_warning,
)
from ridepool_backend.app.models.ride_enums import (
    ACTIVE_BOOKING_STATUSES,
    RECONCILABLE_RIDE_STATUSES,
    RideStatus,
)
from ridepool_backend.app.schemas.inventory import (
    DataIntegrityWarning,
    ReconciliationReport,
    ReconcileRequest,
    RideReconciliation,
)
from ridepool_backend.app.services import ride_store

logger = logging.getLogger("ridepool.inventory")

# Failures scoped to a single ride's unit of work
UNIT_FAILURES = (SQLAlchemyError, OSError, asyncio.TimeoutError)


class SeatInventoryReconciler:
    """
    Runs reconciliation passes over rides in a live scheduling state.

    Args:
        session_factory: Opens one AsyncSession per unit of work
        max_concurrency: Upper bound on rides reconciled at the same time
    """

    def __init__(self, session_factory: async_sessionmaker, max_concurrency: Optional[int] = None):
        self.session_factory = session_factory
        self.max_concurrency = max(1, max_concurrency or settings.reconcile_max_concurrency)

    async def reconcile(self, scope: Optional[ReconcileRequest] = None) -> ReconciliationReport:
        """
        Reconcile every ride selected by `scope`.

        Flow:
        1. Validate scope (only scheduled / in-progress rides hold live inventory)
        2. Enumerate ride ids (fatal on failure)
        3. Fan out one unit of work per ride, bounded by max_concurrency
        4. Assemble the report in ride id order

        Raises:
            InvalidReconcileScopeError: Scope names a terminal status
            StoreFailureError: Rides could not be enumerated
        """
        scope = scope or ReconcileRequest(statuses=settings.reconcile_default_statuses)
        statuses = _validate_statuses(scope.statuses)
        started_at = datetime.utcnow()

        ride_ids = await self._select_ride_ids(statuses, scope.driver_id, scope.ride_ids)
        logger.info(
            "Reconciliation started",
            extra={"statuses": [s.value for s in statuses], "rides": len(ride_ids), "dry_run": scope.dry_run}
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(ride_id: int) -> RideReconciliation:
            async with semaphore:
                return await self.reconcile_ride(ride_id, statuses, dry_run=scope.dry_run)

        outcomes = await asyncio.gather(*(bounded(ride_id) for ride_id in ride_ids))
        outcomes = sorted(outcomes, key=lambda o: o.ride_id)

        report = ReconciliationReport(
            statuses=statuses,
            dry_run=scope.dry_run,
            inspected=len(outcomes),
            corrected=sum(1 for o in outcomes if o.corrected),
            failed=sum(1 for o in outcomes if o.failed),
            oversold=sum(1 for o in outcomes if o.oversold),
            rides=outcomes,
            started_at=started_at,
            finished_at=datetime.utcnow(),
        )
        logger.info(
            "Reconciliation finished",
            extra={
                "inspected": report.inspected,
                "corrected": report.corrected,
                "failed": report.failed,
                "oversold": report.oversold,
            }
        )
        return report

    async def reconcile_ride(
        self,
        ride_id: int,
        statuses: Sequence[RideStatus] = RECONCILABLE_RIDE_STATUSES,
        dry_run: bool = False,
    ) -> RideReconciliation:
        """
        Reconcile a single ride in its own session and transaction.

        Store failures are caught and recorded on the returned outcome.
        """
        try:
            async with self.session_factory() as db:
                outcome = await _reconcile_in_session(db, ride_id, statuses, dry_run)
                if outcome.corrected and not dry_run:
                    await db.commit()
                    logger.info(
                        "Corrected available seats",
                        extra={"ride_id": ride_id, "old": outcome.old_available, "new": outcome.new_available}
                    )
        except UNIT_FAILURES as exc:
            logger.error(
                "Reconciliation failed for ride",
                extra={"ride_id": ride_id, "error": f"{type(exc).__name__}: {exc}"}
            )
            return RideReconciliation(ride_id=ride_id, error=f"{type(exc).__name__}: {exc}")

        for warning in outcome.warnings:
            logger.warning(
                warning.message,
                extra={"code": warning.code, "ride_id": warning.ride_id, "booking_id": warning.booking_id}
            )
        return outcome

    async def _select_ride_ids(
        self,
        statuses: Sequence[RideStatus],
        driver_id: Optional[int],
        ride_ids: Optional[Sequence[int]],
    ) -> List[int]:
        try:
            async with self.session_factory() as db:
                rides = await ride_store.list_rides(db, statuses, driver_id=driver_id, ride_ids=ride_ids)
                return [ride.id for ride in rides]
        except UNIT_FAILURES as exc:
            logger.error("Could not enumerate rides for reconciliation", extra={"error": str(exc)})
            raise StoreFailureError("ride enumeration", exc) from exc


async def _reconcile_in_session(
    db: AsyncSession,
    ride_id: int,
    statuses: Sequence[RideStatus],
    dry_run: bool,
) -> RideReconciliation:
    ride = await ride_store.get_ride(db, ride_id)
    if ride is None or ride.status not in statuses:
        # Deleted or moved on since enumeration; nothing to correct.
        current = None if ride is None else ride.available_seats
        return RideReconciliation(ride_id=ride_id, old_available=current, new_available=current)

    bookings = await ride_store.list_bookings(db, [ride.id], ACTIVE_BOOKING_STATUSES)

    warnings: List[DataIntegrityWarning] = []
    consumed = 0
    for booking in bookings:
        consumed += capacity_seats(booking.number_of_seats)
        seats_warning = invalid_seats_warning(ride.id, booking)
        if seats_warning:
            warnings.append(seats_warning)

    correct_available = ride.total_seats - consumed
    if correct_available < 0:
        warnings.append(DataIntegrityWarning(
            code=WarningCode.OVERSOLD_RIDE,
            message=(
                f"Ride {ride.id} is oversold: {consumed} seats held against "
                f"capacity {ride.total_seats}"
            ),
            ride_id=ride.id,
        ))

    old_available = ride.available_seats
    drifted = old_available != correct_available
    if drifted and not dry_run:
        await ride_store.set_available_seats(db, ride.id, correct_available)

    return RideReconciliation(
        ride_id=ride.id,
        total_seats=ride.total_seats,
        consumed_seats=consumed,
        active_bookings=len(bookings),
        old_available=old_available,
        new_available=correct_available,
        corrected=drifted,
        warnings=warnings,
    )


def _validate_statuses(statuses: Iterable) -> List[RideStatus]:
    requested = sorted({RideStatus(s) for s in statuses}, key=lambda s: s.value)
    invalid = [s.value for s in requested if s not in RECONCILABLE_RIDE_STATUSES]
    if invalid:
        raise InvalidReconcileScopeError(invalid)
    return requested
