"""
Seat reconciliation job.

Recomputes available seats for open rides from their pending and confirmed
bookings and writes back any ride that has drifted. Safe to re-run.

Usage:
    python scripts/reconcile_seats.py [--status scheduled --status in-progress]
                                      [--driver-id 7] [--dry-run] [--concurrency 10]

Exit code is 1 when any ride could not be reconciled, 2 when rides could
not be enumerated at all.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ridepool_backend.app.core.config import settings
from ridepool_backend.app.core.exceptions import AppException
from ridepool_backend.app.core.observability import configure_logging
from ridepool_backend.app.db.session import AsyncSessionLocal, engine
from ridepool_backend.app.domain.inventory.seat_reconciler import SeatInventoryReconciler
from ridepool_backend.app.models.ride_enums import RECONCILABLE_RIDE_STATUSES
from ridepool_backend.app.schemas.inventory import ReconcileRequest, ReconciliationReport


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fix drifted available seat counts")
    parser.add_argument(
        "--status",
        action="append",
        choices=[s.value for s in RECONCILABLE_RIDE_STATUSES],
        help="Ride status to include (repeatable, default from settings)",
    )
    parser.add_argument("--driver-id", type=int, default=None, help="Only rides of this driver")
    parser.add_argument("--dry-run", action="store_true", help="Report drift without writing")
    parser.add_argument("--concurrency", type=int, default=None, help="Rides reconciled in parallel")
    return parser.parse_args(argv)


def print_report(report: ReconciliationReport) -> None:
    print(f"Checked {report.inspected} rides ({', '.join(s.value for s in report.statuses)})")
    for ride in report.rides:
        if ride.failed:
            print(f"❌ Ride {ride.ride_id}: {ride.error}")
            continue
        if ride.corrected:
            verb = "Would fix" if report.dry_run else "Fixed"
            print(f"🔧 {verb} ride {ride.ride_id}:")
            print(f"   Total seats: {ride.total_seats}")
            print(f"   Booked seats: {ride.consumed_seats} ({ride.active_bookings} bookings)")
            print(f"   Available: {ride.old_available} -> {ride.new_available}")
        else:
            print(f"✅ Ride {ride.ride_id} is already correct ({ride.new_available} available of {ride.total_seats})")
        for warning in ride.warnings:
            print(f"   ⚠️  {warning.code}: {warning.message}")

    print(
        f"\nSummary: {report.corrected} corrected, {report.failed} failed, "
        f"{report.oversold} oversold{' (dry run)' if report.dry_run else ''}"
    )


async def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(settings.log_level)

    scope = ReconcileRequest(
        statuses=args.status or settings.reconcile_default_statuses,
        driver_id=args.driver_id,
        dry_run=args.dry_run,
    )
    reconciler = SeatInventoryReconciler(AsyncSessionLocal, max_concurrency=args.concurrency)

    try:
        report = await reconciler.reconcile(scope)
    except AppException as exc:
        print(f"❌ {exc.message}: {exc.details}")
        return 2
    finally:
        await engine.dispose()

    print_report(report)
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
