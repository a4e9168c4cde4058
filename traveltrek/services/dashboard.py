"""Operator console read models."""

from collections import Counter
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.clock import utcnow
from traveltrek.models import Destination, Membership, MembershipStatus, User
from traveltrek.schemas.admin import DashboardStats
from traveltrek.services.membership.status import derive_status


async def _count(db: AsyncSession, stmt) -> int:
    result = await db.execute(stmt)
    return result.scalar_one()


async def get_stats(db: AsyncSession, now: datetime | None = None) -> DashboardStats:
    """
    Headline counts for the console.

    Membership counts use the effective status, so an ACTIVE row past its
    end date is counted as expired even before anyone reads it.
    """
    now = now or utcnow()
    rows = await db.execute(select(Membership.status, Membership.end_date))
    by_status = Counter(derive_status(row, now) for row in rows)

    return DashboardStats(
        total_users=await _count(db, select(func.count(User.id))),
        total_memberships=sum(by_status.values()),
        active_memberships=by_status[MembershipStatus.ACTIVE],
        pending_memberships=by_status[MembershipStatus.PENDING],
        expired_memberships=by_status[MembershipStatus.EXPIRED],
        total_destinations=await _count(db, select(func.count(Destination.id))),
    )


async def list_users(db: AsyncSession) -> list[User]:
    """All users, newest first, with their membership loaded."""
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def list_memberships(
    db: AsyncSession, status: MembershipStatus | None = None, now: datetime | None = None
) -> list[Membership]:
    """Memberships newest first, optionally filtered on their effective status."""
    result = await db.execute(select(Membership).order_by(Membership.created_at.desc()))
    memberships = list(result.scalars().all())
    if status is None:
        return memberships
    now = now or utcnow()
    return [m for m in memberships if derive_status(m, now) == status]
