"""
Shared pytest fixtures: an in-memory database, simulated clocks and
recording fakes for the notification and AI collaborators.
"""

import os

# Must be set before traveltrek.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("GEMINI_API_KEY", "")

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import traveltrek.models  # noqa: F401 - register mappers on Base.metadata
from traveltrek.database import Base
from traveltrek.services.stores import EphemeralStore, OtpStore, RateLimiter


class SimulatedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingDispatcher:
    """Stands in for NotificationDispatcher and remembers what was sent."""

    def __init__(self):
        self.sent: list[tuple] = []

    def activation(self, user, membership_number, plan_type) -> None:
        self.sent.append(("activation", user.email, membership_number, str(getattr(plan_type, "value", plan_type))))

    def welcome(self, user) -> None:
        self.sent.append(("welcome", user.email))

    def otp(self, user, code, purpose) -> None:
        self.sent.append(("otp", user.email, code, purpose))

    def rejection(self, user, reason) -> None:
        self.sent.append(("rejection", user.email, reason))

    def of_kind(self, kind: str) -> list[tuple]:
        return [s for s in self.sent if s[0] == kind]

    def last_otp(self) -> str:
        return self.of_kind("otp")[-1][2]


class ScriptedConcierge:
    """AI stand-in that streams fixed chunks."""

    def __init__(self, chunks: list[str] | None = None):
        self.chunks = chunks or ["Hello ", "traveller!"]
        self.calls: list[str] = []

    async def stream_reply(self, message, user, membership, destinations):
        self.calls.append(message)
        for chunk in self.chunks:
            yield chunk


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def clock():
    return SimulatedClock()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def concierge():
    return ScriptedConcierge()


@pytest.fixture
def otp_store(clock):
    return OtpStore(ttl_seconds=300, backend=EphemeralStore("otp", clock=clock))


@pytest.fixture
def rate_limiter(clock):
    return RateLimiter(limit=10, window_seconds=60, backend=EphemeralStore("rate-limit", clock=clock))


@pytest.fixture
async def file_session_maker(tmp_path):
    """Sessions on a database file, so each session gets its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'traveltrek.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()
