"""Tests for pure membership status derivations."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from traveltrek.models import MembershipStatus, PlanType
from traveltrek.services.membership.status import (
    add_years,
    compute_validity,
    derive_status,
    extend_end_date,
    plan_label,
    plan_years,
    remaining_days,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def membership(**overrides):
    values = {
        "status": MembershipStatus.ACTIVE,
        "end_date": NOW + timedelta(days=30),
        "total_days": 6,
        "used_days": 0,
        "custom_days_added": 0,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.mark.parametrize(
    "plan_type, years, label",
    [
        (PlanType.ONE_YEAR, 1, "1-Year"),
        (PlanType.THREE_YEAR, 3, "3-Year"),
        ("5Y", 5, "5-Year"),
    ],
)
def test_plan_years_and_labels(plan_type, years, label):
    assert plan_years(plan_type) == years
    assert plan_label(plan_type) == label


def test_unknown_plan_type_is_rejected():
    with pytest.raises(ValueError):
        plan_years("2Y")


def test_add_years_keeps_calendar_day():
    assert add_years(NOW, 3) == datetime(2028, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_add_years_from_leap_day_lands_on_feb_28():
    leap_day = datetime(2024, 2, 29, 8, 30, tzinfo=timezone.utc)
    assert add_years(leap_day, 1) == datetime(2025, 2, 28, 8, 30, tzinfo=timezone.utc)
    assert add_years(leap_day, 4) == datetime(2028, 2, 29, 8, 30, tzinfo=timezone.utc)


def test_compute_validity_starts_now():
    start, end = compute_validity(PlanType.ONE_YEAR, NOW)
    assert start == NOW
    assert end == datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestDeriveStatus:
    def test_active_before_end_date(self):
        assert derive_status(membership(), NOW) == MembershipStatus.ACTIVE

    def test_active_past_end_date_reads_expired(self):
        m = membership(end_date=NOW - timedelta(seconds=1))
        assert derive_status(m, NOW) == MembershipStatus.EXPIRED

    def test_end_date_equal_to_now_is_still_active(self):
        assert derive_status(membership(end_date=NOW), NOW) == MembershipStatus.ACTIVE

    def test_naive_end_date_is_treated_as_utc(self):
        naive = (NOW - timedelta(days=1)).replace(tzinfo=None)
        assert derive_status(membership(end_date=naive), NOW) == MembershipStatus.EXPIRED

    def test_pending_is_never_expired(self):
        m = membership(status=MembershipStatus.PENDING, end_date=None)
        assert derive_status(m, NOW) == MembershipStatus.PENDING

    def test_derivation_does_not_mutate(self):
        m = membership(end_date=NOW - timedelta(days=1))
        derive_status(m, NOW)
        assert m.status == MembershipStatus.ACTIVE


class TestRemainingDays:
    def test_includes_custom_days(self):
        assert remaining_days(membership(total_days=6, custom_days_added=4, used_days=3)) == 7

    def test_overshoot_is_negative(self):
        assert remaining_days(membership(total_days=6, used_days=8)) == -2

    def test_is_stable_across_reads(self):
        m = membership(total_days=18, custom_days_added=2, used_days=5)
        assert remaining_days(m) == remaining_days(m) == 15


def test_extend_end_date():
    assert extend_end_date(NOW, 10) == NOW + timedelta(days=10)
    assert extend_end_date(None, 10) is None
