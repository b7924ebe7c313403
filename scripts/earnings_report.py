"""
Earnings report.

Prints fleet-wide earnings for completed rides, or the breakdown for a
single driver when --driver-id is given.

Usage:
    python scripts/earnings_report.py [--driver-id 7]
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
from ridepool_backend.app.domain.earnings.earnings_service import EarningsService
from ridepool_backend.app.schemas.earnings import RideEarnings


def print_ride(index: int, ride: RideEarnings, currency: str) -> None:
    print(f"{index}. Ride #{ride.ride_id}")
    print(f"   Driver: {ride.driver_name} (ID: {ride.driver_id})")
    print(f"   Route: {ride.from_city} → {ride.to_city}")
    print(f"   Distance: {ride.distance} km")
    print(f"   Bookings: {ride.bookings_count} ({ride.passengers} passengers)")
    print(f"   Earnings: {ride.earnings} {currency}")
    if ride.completed_at:
        print(f"   Completed: {ride.completed_at.date().isoformat()}")
    for warning in ride.warnings:
        print(f"   ⚠️  {warning.code}: {warning.message}")


async def fleet_report() -> None:
    async with AsyncSessionLocal() as db:
        summary = await EarningsService.get_fleet_earnings(db)

    print("\n📊 COMPLETED RIDES\n")
    if summary.total_rides == 0:
        print("No completed rides found.")
        return

    for index, ride in enumerate(summary.per_ride, start=1):
        print_ride(index, ride, summary.currency)
        print("")

    print("Per driver:")
    for driver in summary.per_driver:
        print(
            f"  - {driver.driver_name} (ID: {driver.driver_id}): {driver.total_earnings} {summary.currency} "
            f"over {driver.total_rides} rides"
        )
    print(f"\n💰 Total earnings across all drivers: {summary.total_earnings} {summary.currency}")


async def driver_report(driver_id: int) -> None:
    async with AsyncSessionLocal() as db:
        summary = await EarningsService.get_driver_earnings(db, driver_id)

    print(f"\n📊 Earnings for driver {driver_id}\n")
    for index, ride in enumerate(summary.per_ride, start=1):
        print_ride(index, ride, summary.currency)
        print("")

    print(f"✅ Total earnings: {summary.total_earnings} {summary.currency}")
    print(f"📈 Total rides: {summary.total_rides}")
    print(f"👥 Total passengers: {summary.total_passengers}")
    print(f"📏 Total distance: {summary.total_distance} km")
    print(f"💵 Avg per ride: {summary.average_per_ride} {summary.currency}")
    print(f"🗓️  This week: {summary.this_week}  This month: {summary.this_month}")


async def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Print driver earnings for completed rides")
    parser.add_argument("--driver-id", type=int, default=None)
    args = parser.parse_args(argv)
    configure_logging(settings.log_level)

    try:
        if args.driver_id is None:
            await fleet_report()
        else:
            await driver_report(args.driver_id)
    except AppException as exc:
        print(f"❌ {exc.message}: {exc.details}")
        return 2
    finally:
        await engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
