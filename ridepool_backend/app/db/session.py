"""
Database engine and session factories for the ride/booking store.

PostgreSQL (asyncpg) in deployment. A sqlite+aiosqlite URL is accepted
for local runs of the scripts, in which case pool sizing is not applied.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from ridepool_backend.app.core.config import settings


def _engine_options(database_url: str) -> dict:
    options = {"echo": settings.db_echo, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
    return options


engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# One session per request, or per ride during a reconciliation pass
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """FastAPI dependency yielding a request-scoped session."""
    async with AsyncSessionLocal() as session:
        yield session


def get_session_factory() -> async_sessionmaker:
    """
    FastAPI dependency for the session factory itself.

    The reconciler opens its own session for each ride it inspects.
    """
    return AsyncSessionLocal
