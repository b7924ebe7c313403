"""
Reductions over per-ride earnings.

Each fold is a plain sum over Decimal values, so the result does not depend
on the order the ride computations are supplied in.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ridepool_backend.app.domain.earnings.pricing import ZERO, to_cents
from ridepool_backend.app.schemas.earnings import DriverTotals, EarningsTotals, RideEarnings


def fold_earnings(rides: Iterable[RideEarnings]) -> EarningsTotals:
    """Sum earnings, passengers and distance over a set of rides."""
    rides = list(rides)
    return EarningsTotals(
        total_earnings=sum((r.earnings for r in rides), ZERO),
        total_rides=len(rides),
        total_passengers=sum(r.passengers for r in rides),
        total_distance=sum((r.distance for r in rides), ZERO),
    )


def average_per_ride(totals: EarningsTotals) -> Decimal:
    """Mean earnings per ride, zero when there are no rides."""
    if totals.total_rides == 0:
        return to_cents(ZERO)
    return to_cents(totals.total_earnings / totals.total_rides)


def fold_by_driver(rides: Iterable[RideEarnings]) -> List[DriverTotals]:
    """Per-driver totals, ordered by driver id."""
    grouped: Dict[int, List[RideEarnings]] = {}
    for ride in rides:
        grouped.setdefault(ride.driver_id, []).append(ride)

    per_driver = []
    for driver_id in sorted(grouped):
        driver_rides = grouped[driver_id]
        totals = fold_earnings(driver_rides)
        # Names are denormalized per ride; pick deterministically.
        driver_name = min(r.driver_name for r in driver_rides)
        per_driver.append(DriverTotals(driver_id=driver_id, driver_name=driver_name, **totals.model_dump()))
    return per_driver


def earnings_since(rides: Iterable[RideEarnings], since: datetime) -> Decimal:
    """Earnings of rides completed at or after `since`."""
    return sum(
        (r.earnings for r in rides if r.completed_at is not None and naive_utc(r.completed_at) >= naive_utc(since)),
        ZERO,
    )


def earnings_by_date(rides: Iterable[RideEarnings]) -> Dict[str, Decimal]:
    """Earnings grouped by completion date (ISO YYYY-MM-DD), newest date first."""
    by_date: Dict[str, Decimal] = {}
    for ride in rides:
        if ride.completed_at is None:
            continue
        key = ride.completed_at.date().isoformat()
        by_date[key] = by_date.get(key, ZERO) + ride.earnings
    return dict(sorted(by_date.items(), reverse=True))


def week_start(now: datetime) -> datetime:
    return now - timedelta(days=7)


def month_start(now: datetime) -> datetime:
    """Same day-of-month one calendar month back, clamped to the month's last day."""
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = now.day
    while True:
        try:
            return now.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive timestamps even for timezone-aware columns
    if value is None or value.tzinfo is None:
        return value
    return (value - value.utcoffset()).replace(tzinfo=None)
