"""Pure membership state derivations.

Nothing here touches the database. The lifecycle manager persists whatever
these functions decide.
"""

from datetime import datetime, timedelta

from traveltrek.clock import ensure_utc
from traveltrek.models.enums import MembershipStatus, PlanType

# Validity period per plan, in years
PLAN_YEARS = {
    PlanType.ONE_YEAR: 1,
    PlanType.THREE_YEAR: 3,
    PlanType.FIVE_YEAR: 5,
}

PLAN_LABELS = {
    PlanType.ONE_YEAR: "1-Year",
    PlanType.THREE_YEAR: "3-Year",
    PlanType.FIVE_YEAR: "5-Year",
}


def plan_years(plan_type: PlanType | str) -> int:
    return PLAN_YEARS[PlanType(plan_type)]


def plan_label(plan_type: PlanType | str) -> str:
    return PLAN_LABELS[PlanType(plan_type)]


def add_years(start: datetime, years: int) -> datetime:
    """
    Same calendar day `years` later.

    Feb 29 lands on Feb 28 when the target year is not a leap year.
    """
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        return start.replace(year=start.year + years, day=28)


def compute_validity(plan_type: PlanType | str, now: datetime) -> tuple[datetime, datetime]:
    """Start and end of a membership activated at `now`."""
    return now, add_years(now, plan_years(plan_type))


def derive_status(membership, now: datetime) -> MembershipStatus:
    """
    Effective status of a membership at `now`.

    ACTIVE memberships past their end date read as EXPIRED; every other
    stored status is returned unchanged.
    """
    status = MembershipStatus(membership.status)
    end_date = ensure_utc(membership.end_date)
    if status == MembershipStatus.ACTIVE and end_date is not None and now > end_date:
        return MembershipStatus.EXPIRED
    return status


def remaining_days(membership) -> int:
    """Entitled days left. Not clamped: overshoot shows as a negative number."""
    return membership.total_days + (membership.custom_days_added or 0) - membership.used_days


def extend_end_date(end_date: datetime | None, days: int) -> datetime | None:
    if end_date is None:
        return None
    return end_date + timedelta(days=days)
