"""
Database seeding script for development rides.

Creates a handful of scheduled, in-progress and completed rides with
bookings, including one ride with drifted seats and one oversold ride,
so the reconciliation and earnings reports have something to show.
"""

import asyncio
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ridepool_backend.app.db.session import AsyncSessionLocal, engine, Base
from ridepool_backend.app.models.ride import Ride
from ridepool_backend.app.models.booking import Booking
from ridepool_backend.app.models.ride_enums import RideStatus, BookingStatus
from sqlalchemy import select, func


async def seed_rides():
    """
    Seed development rides.

    Creates:
    - 2 scheduled rides (one drifted, one oversold)
    - 1 in-progress ride
    - 3 completed rides across 2 drivers
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting ride seeding...")

        existing = (await db.execute(select(func.count(Ride.id)))).scalar() or 0
        if existing:
            print(f"ℹ️  {existing} rides already exist, skipping seeding")
            return

        now = datetime.utcnow()

        # Scheduled, advertised 4 seats although 3 are held
        drifted = Ride(
            driver_id=1, driver_name="Alice Martin", from_city="Lyon", to_city="Geneva",
            distance=150.0, total_seats=4, available_seats=4, status=RideStatus.SCHEDULED,
        )
        # Scheduled, 3 seats held against capacity 2
        oversold = Ride(
            driver_id=2, driver_name="Bruno Costa", from_city="Porto", to_city="Braga",
            distance=55.0, total_seats=2, available_seats=0, status=RideStatus.SCHEDULED,
        )
        underway = Ride(
            driver_id=1, driver_name="Alice Martin", from_city="Geneva", to_city="Bern",
            distance=160.0, total_seats=3, available_seats=2, status=RideStatus.IN_PROGRESS,
        )
        db.add_all([drifted, oversold, underway])
        print("✅ Created 3 open rides")

        completed = [
            Ride(
                driver_id=1, driver_name="Alice Martin", from_city="Paris", to_city="Lille",
                distance=225.0, total_seats=4, available_seats=1, status=RideStatus.COMPLETED,
                updated_at=now - timedelta(days=2),
            ),
            Ride(
                driver_id=1, driver_name="Alice Martin", from_city="Lille", to_city="Brussels",
                distance=110.0, total_seats=3, available_seats=2, status=RideStatus.COMPLETED,
                updated_at=now - timedelta(days=20),
            ),
            Ride(
                driver_id=2, driver_name="Bruno Costa", from_city="Lisbon", to_city="Porto",
                distance=313.0, total_seats=4, available_seats=0, status=RideStatus.COMPLETED,
                updated_at=now - timedelta(days=1),
            ),
        ]
        db.add_all(completed)
        await db.flush()
        print("✅ Created 3 completed rides")

        bookings = [
            Booking(ride_id=drifted.id, rider_id=101, number_of_seats=2, status=BookingStatus.CONFIRMED),
            Booking(ride_id=drifted.id, rider_id=102, number_of_seats=1, status=BookingStatus.PENDING),
            Booking(ride_id=drifted.id, rider_id=103, number_of_seats=3, status=BookingStatus.CANCELLED),
            Booking(ride_id=oversold.id, rider_id=104, number_of_seats=2, status=BookingStatus.CONFIRMED),
            Booking(ride_id=oversold.id, rider_id=105, number_of_seats=1, status=BookingStatus.CONFIRMED),
            Booking(ride_id=underway.id, rider_id=106, number_of_seats=1, status=BookingStatus.CONFIRMED),
            Booking(ride_id=completed[0].id, rider_id=107, number_of_seats=2, status=BookingStatus.COMPLETED),
            Booking(ride_id=completed[0].id, rider_id=108, number_of_seats=None, status=BookingStatus.CONFIRMED),
            Booking(ride_id=completed[1].id, rider_id=109, number_of_seats=1, status=BookingStatus.COMPLETED),
            Booking(ride_id=completed[1].id, rider_id=110, number_of_seats=2, status=BookingStatus.PENDING),
            Booking(ride_id=completed[2].id, rider_id=111, number_of_seats=4, status=BookingStatus.COMPLETED),
        ]
        db.add_all(bookings)

        await db.commit()

        print(f"✅ Created {len(bookings)} bookings")
        print("\n🎉 Ride seeding completed successfully!")
        print("\nTry:")
        print("  - python scripts/reconcile_seats.py --dry-run")
        print("  - python scripts/earnings_report.py")


if __name__ == "__main__":
    asyncio.run(seed_rides())
