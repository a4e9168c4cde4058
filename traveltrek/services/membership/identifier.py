"""Membership number allocation."""

import structlog
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.clock import utcnow
from traveltrek.models.membership_counter import MembershipCounter

logger = structlog.get_logger()

COUNTER_WIDTH = 6


def format_membership_number(year: int, counter: int) -> str:
    """YYYY followed by the zero-padded counter, e.g. 2025000007."""
    return f"{year:04d}{counter:0{COUNTER_WIDTH}d}"


def _upsert_for(dialect_name: str):
    if dialect_name == "sqlite":
        return sqlite_insert
    return pg_insert


async def allocate_membership_number(db: AsyncSession, year: int) -> str:
    """
    Allocate the next membership number for `year`.

    The counter row is created or incremented in a single
    INSERT ... ON CONFLICT DO UPDATE ... RETURNING statement, so concurrent
    callers serialize on the row and never observe the same value. Runs in
    the caller's transaction: rolling it back releases nothing because the
    increment is rolled back with it.
    """
    insert = _upsert_for(db.get_bind().dialect.name)
    stmt = (
        insert(MembershipCounter)
        .values(year=year, counter=1, updated_at=utcnow())
        .on_conflict_do_update(
            index_elements=[MembershipCounter.year],
            set_={
                "counter": MembershipCounter.counter + 1,
                "updated_at": utcnow(),
            },
        )
        .returning(MembershipCounter.counter)
    )
    result = await db.execute(stmt)
    counter = result.scalar_one()

    membership_number = format_membership_number(year, counter)
    logger.info("Allocated membership number", year=year, membership_number=membership_number)
    return membership_number
