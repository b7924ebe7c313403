"""
Seat Inventory Reconciler tests.

Validates drift correction, idempotence, scope handling and oversold
reporting against the in-memory database.
"""

import asyncio

import pytest

from ridepool_backend.app.core.exceptions import InvalidReconcileScopeError
from ridepool_backend.app.domain.inventory.seat_reconciler import SeatInventoryReconciler
from ridepool_backend.app.domain.seat_policy import WarningCode, capacity_seats, passenger_seats
from ridepool_backend.app.models.ride_enums import RideStatus
from ridepool_backend.app.schemas.inventory import ReconcileRequest, RideReconciliation
from ridepool_backend.app.services import ride_store


@pytest.fixture
def reconciler(session_factory):
    return SeatInventoryReconciler(session_factory, max_concurrency=1)


@pytest.mark.asyncio
async def test_active_bookings_drive_available_seats(reconciler, create_ride, stored_seats):
    """Confirmed and pending bookings hold seats; cancelled ones do not."""
    ride = await create_ride(
        total_seats=4,
        available_seats=4,
        bookings=[(2, "confirmed"), (1, "pending"), (3, "cancelled")],
    )

    report = await reconciler.reconcile()

    assert report.inspected == 1
    assert report.corrected == 1
    outcome = report.rides[0]
    assert outcome.ride_id == ride.id
    assert outcome.consumed_seats == 3
    assert outcome.active_bookings == 2
    assert outcome.old_available == 4
    assert outcome.new_available == 1
    assert outcome.corrected is True
    assert outcome.warnings == []
    assert await stored_seats(ride.id) == 1


@pytest.mark.asyncio
async def test_correct_ride_is_not_written(reconciler, create_ride, stored_seats):
    ride = await create_ride(total_seats=3, available_seats=2, bookings=[(1, "confirmed")])

    report = await reconciler.reconcile()

    assert report.corrected == 0
    assert report.rides[0].corrected is False
    assert report.rides[0].new_available == 2
    assert await stored_seats(ride.id) == 2


@pytest.mark.asyncio
async def test_second_pass_performs_no_writes(reconciler, create_ride, stored_seats):
    """Re-running without booking changes is a no-op."""
    first_ride = await create_ride(total_seats=4, available_seats=0, bookings=[(2, "confirmed")])
    second_ride = await create_ride(total_seats=2, available_seats=2, bookings=[(1, "pending")])

    first = await reconciler.reconcile()
    second = await reconciler.reconcile()

    assert first.corrected == 2
    assert second.corrected == 0
    assert all(not outcome.corrected for outcome in second.rides)
    assert await stored_seats(first_ride.id) == 2
    assert await stored_seats(second_ride.id) == 1


@pytest.mark.asyncio
async def test_invariant_holds_for_every_ride_after_pass(reconciler, create_ride, stored_seats):
    cases = [
        (4, 4, [(1, "confirmed"), (1, "confirmed")]),
        (3, 0, []),
        (5, 1, [(2, "pending"), (None, "confirmed"), (4, "completed")]),
        (2, 2, [(1, "cancelled")]),
    ]
    rides = []
    for total, available, bookings in cases:
        rides.append((await create_ride(total_seats=total, available_seats=available, bookings=bookings), total, bookings))

    await reconciler.reconcile()

    for ride, total, bookings in rides:
        held = sum(capacity_seats(seats) for seats, status in bookings if status in ("pending", "confirmed"))
        assert await stored_seats(ride.id) == total - held


@pytest.mark.asyncio
async def test_oversold_ride_is_written_and_reported(reconciler, create_ride, stored_seats):
    """Oversold rides keep their negative count and carry a warning."""
    ride = await create_ride(total_seats=2, available_seats=0, bookings=[(2, "confirmed"), (1, "pending")])

    report = await reconciler.reconcile()

    outcome = report.rides[0]
    assert outcome.new_available == -1
    assert outcome.corrected is True
    assert report.oversold == 1
    assert [w.code for w in outcome.warnings] == [WarningCode.OVERSOLD_RIDE]
    assert outcome.warnings[0].ride_id == ride.id
    assert await stored_seats(ride.id) == -1


@pytest.mark.asyncio
async def test_oversold_warning_repeats_without_rewrite(reconciler, create_ride):
    await create_ride(total_seats=1, available_seats=-1, bookings=[(2, "confirmed")])

    report = await reconciler.reconcile()

    assert report.corrected == 0
    assert report.oversold == 1
    assert report.rides[0].warnings[0].code == WarningCode.OVERSOLD_RIDE


@pytest.mark.asyncio
async def test_missing_seat_count_holds_no_capacity(reconciler, create_ride, stored_seats):
    ride = await create_ride(total_seats=3, available_seats=3, bookings=[(None, "confirmed"), (0, "pending")])

    report = await reconciler.reconcile()

    assert report.rides[0].consumed_seats == 0
    assert report.rides[0].corrected is False
    assert await stored_seats(ride.id) == 3


@pytest.mark.asyncio
async def test_negative_seat_count_is_reported(reconciler, create_ride, stored_seats):
    ride = await create_ride(total_seats=3, available_seats=3, bookings=[(-2, "confirmed"), (1, "confirmed")])

    report = await reconciler.reconcile()

    outcome = report.rides[0]
    assert outcome.consumed_seats == 1
    assert [w.code for w in outcome.warnings] == [WarningCode.INVALID_BOOKING_SEATS]
    assert outcome.warnings[0].booking_id is not None
    assert await stored_seats(ride.id) == 2


def test_seat_defaults_differ_between_capacity_and_passengers():
    assert capacity_seats(None) == 0
    assert capacity_seats(0) == 0
    assert passenger_seats(None) == 1
    assert passenger_seats(0) == 1
    assert capacity_seats(3) == passenger_seats(3) == 3


@pytest.mark.asyncio
async def test_default_scope_only_covers_scheduled_rides(reconciler, create_ride, stored_seats):
    scheduled = await create_ride(total_seats=4, available_seats=4, bookings=[(1, "confirmed")])
    underway = await create_ride(
        total_seats=4, available_seats=4, bookings=[(1, "confirmed")], status=RideStatus.IN_PROGRESS
    )
    completed = await create_ride(
        total_seats=4, available_seats=4, bookings=[(1, "confirmed")], status=RideStatus.COMPLETED
    )

    report = await reconciler.reconcile()

    assert [o.ride_id for o in report.rides] == [scheduled.id]
    assert await stored_seats(underway.id) == 4
    assert await stored_seats(completed.id) == 4


@pytest.mark.asyncio
async def test_scope_can_include_in_progress_rides(reconciler, create_ride, stored_seats):
    scheduled = await create_ride(total_seats=4, available_seats=4, bookings=[(1, "confirmed")])
    underway = await create_ride(
        total_seats=4, available_seats=4, bookings=[(2, "confirmed")], status=RideStatus.IN_PROGRESS
    )

    report = await reconciler.reconcile(
        ReconcileRequest(statuses=[RideStatus.SCHEDULED, RideStatus.IN_PROGRESS])
    )

    assert [o.ride_id for o in report.rides] == [scheduled.id, underway.id]
    assert await stored_seats(underway.id) == 2


@pytest.mark.asyncio
async def test_scope_narrows_by_driver_and_ride_ids(reconciler, create_ride):
    mine = await create_ride(driver_id=7, available_seats=0)
    await create_ride(driver_id=8, available_seats=0)
    also_mine = await create_ride(driver_id=7, available_seats=0)

    by_driver = await reconciler.reconcile(ReconcileRequest(driver_id=7, dry_run=True))
    by_ids = await reconciler.reconcile(ReconcileRequest(ride_ids=[also_mine.id], dry_run=True))

    assert [o.ride_id for o in by_driver.rides] == [mine.id, also_mine.id]
    assert [o.ride_id for o in by_ids.rides] == [also_mine.id]


@pytest.mark.asyncio
async def test_dry_run_reports_without_writing(reconciler, create_ride, stored_seats):
    ride = await create_ride(total_seats=4, available_seats=4, bookings=[(3, "confirmed")])

    report = await reconciler.reconcile(ReconcileRequest(dry_run=True))

    assert report.dry_run is True
    assert report.corrected == 1
    assert report.rides[0].new_available == 1
    assert await stored_seats(ride.id) == 4


@pytest.mark.asyncio
async def test_terminal_status_scope_is_rejected(reconciler):
    with pytest.raises(InvalidReconcileScopeError) as exc_info:
        await reconciler.reconcile(ReconcileRequest(statuses=[RideStatus.COMPLETED]))

    assert exc_info.value.details["statuses"] == ["completed"]


@pytest.mark.asyncio
async def test_empty_scope_returns_empty_report(reconciler):
    report = await reconciler.reconcile()

    assert report.inspected == 0
    assert report.corrected == 0
    assert report.rides == []


@pytest.mark.asyncio
async def test_zero_seat_count_is_reported(reconciler, create_ride, stored_seats):
    ride = await create_ride(total_seats=3, available_seats=3, bookings=[(0, "confirmed")])

    report = await reconciler.reconcile()

    outcome = report.rides[0]
    assert outcome.consumed_seats == 0
    assert outcome.corrected is False
    assert [w.code for w in outcome.warnings] == [WarningCode.INVALID_BOOKING_SEATS]
    assert await stored_seats(ride.id) == 3


@pytest.mark.asyncio
async def test_point_update_leaves_loaded_ride_untouched(db_session, create_ride, stored_seats):
    ride = await create_ride(total_seats=4, available_seats=4)

    loaded = await ride_store.get_ride(db_session, ride.id)
    await ride_store.set_available_seats(db_session, ride.id, 1)
    await db_session.commit()

    assert loaded.available_seats == 4
    assert await stored_seats(ride.id) == 1


@pytest.mark.asyncio
async def test_concurrency_limit_and_report_order(session_factory, create_ride, mocker):
    """Rides finishing out of order still come back sorted, never more than the limit at once."""
    rides = [await create_ride(available_seats=0) for _ in range(8)]
    ride_ids = [r.id for r in rides]
    in_flight = 0
    peak = 0

    async def staggered(self, ride_id, statuses=(), dry_run=False):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        # Later rides finish first
        await asyncio.sleep(0.001 * (max(ride_ids) - ride_id + 1))
        in_flight -= 1
        return RideReconciliation(ride_id=ride_id, old_available=0, new_available=4, corrected=True)

    mocker.patch.object(SeatInventoryReconciler, "reconcile_ride", new=staggered)

    report = await SeatInventoryReconciler(session_factory, max_concurrency=3).reconcile()

    assert peak == 3
    assert [o.ride_id for o in report.rides] == sorted(ride_ids)
    assert report.corrected == 8
