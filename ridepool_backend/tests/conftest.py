"""
Centralized Test Configuration.
"""

import pytest
from datetime import datetime
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from ridepool_backend.app.main import app
from ridepool_backend.app.core.config import settings
from ridepool_backend.app.db.session import get_db, get_session_factory, Base
from ridepool_backend.app.models.ride import Ride
from ridepool_backend.app.models.booking import Booking
from ridepool_backend.app.models.ride_enums import RideStatus, BookingStatus

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Apply dependency overrides once for the session."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    def override_get_session_factory():
        return TestingSessionLocal

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = override_get_session_factory

    # All sessions share one in-memory connection; keep units sequential
    original_concurrency = settings.reconcile_max_concurrency
    settings.reconcile_max_concurrency = 1
    yield

    app.dependency_overrides = {}
    settings.reconcile_max_concurrency = original_concurrency


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def create_ride(db_session):
    """Insert a ride with optional bookings given as (seats, status) pairs."""

    async def _create(
        bookings=(),
        driver_id=1,
        driver_name="Alice Martin",
        total_seats=4,
        available_seats=None,
        distance=10.0,
        status=RideStatus.SCHEDULED,
        updated_at=None,
    ) -> Ride:
        ride = Ride(
            driver_id=driver_id,
            driver_name=driver_name,
            from_city="Lyon",
            to_city="Geneva",
            distance=distance,
            total_seats=total_seats,
            available_seats=total_seats if available_seats is None else available_seats,
            status=status,
            updated_at=updated_at or datetime(2026, 10, 1, 12, 0, 0),
        )
        db_session.add(ride)
        await db_session.flush()

        for index, (seats, booking_status) in enumerate(bookings):
            db_session.add(Booking(
                ride_id=ride.id,
                rider_id=100 + index,
                number_of_seats=seats,
                status=BookingStatus(booking_status),
            ))
        await db_session.commit()
        return ride

    return _create


@pytest.fixture
def stored_seats():
    """Read a ride's stored available seats in a fresh session."""

    async def _read(ride_id: int) -> int:
        async with TestingSessionLocal() as session:
            ride = await session.get(Ride, ride_id)
            return ride.available_seats

    return _read
