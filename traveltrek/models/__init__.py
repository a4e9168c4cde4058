"""SQLAlchemy database models."""

from traveltrek.models.enums import (
    ChatRole,
    DestinationStatus,
    Difficulty,
    MembershipStatus,
    PaymentRecordStatus,
    PaymentStatus,
    PlanType,
    UserRole,
)
from traveltrek.models.user import User
from traveltrek.models.destination import Destination, plan_destinations, membership_destinations
from traveltrek.models.plan import PlanConfig
from traveltrek.models.membership import Membership
from traveltrek.models.membership_counter import MembershipCounter
from traveltrek.models.payment import Payment
from traveltrek.models.chat_message import ChatMessage

__all__ = [
    # Tables
    "User",
    "Destination",
    "PlanConfig",
    "Membership",
    "MembershipCounter",
    "Payment",
    "ChatMessage",
    "plan_destinations",
    "membership_destinations",
    # Enumerations
    "ChatRole",
    "DestinationStatus",
    "Difficulty",
    "MembershipStatus",
    "PaymentRecordStatus",
    "PaymentStatus",
    "PlanType",
    "UserRole",
]
