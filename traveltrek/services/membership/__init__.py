"""Membership lifecycle, status derivation and number allocation."""

from traveltrek.services.membership.identifier import (
    allocate_membership_number,
    format_membership_number,
)
from traveltrek.services.membership.lifecycle import (
    Activation,
    MembershipLifecycle,
    MembershipSnapshot,
)
from traveltrek.services.membership.status import derive_status, remaining_days

__all__ = [
    "Activation",
    "MembershipLifecycle",
    "MembershipSnapshot",
    "allocate_membership_number",
    "derive_status",
    "format_membership_number",
    "remaining_days",
]
