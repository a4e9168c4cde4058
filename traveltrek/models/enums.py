"""Enumerations stored as plain strings in the database."""

import enum

from sqlalchemy import Enum as SAEnum


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    OPS = "OPS"
    SUPPORT = "SUPPORT"


class PlanType(str, enum.Enum):
    ONE_YEAR = "1Y"
    THREE_YEAR = "3Y"
    FIVE_YEAR = "5Y"


class MembershipStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"


class PaymentStatus(str, enum.Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"
    FAILED = "FAILED"


class PaymentRecordStatus(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MODERATE = "moderate"
    DIFFICULT = "difficult"


class DestinationStatus(str, enum.Enum):
    AVAILABLE = "available"
    NOT_AVAILABLE = "not_available"
    COMING_SOON = "coming_soon"


class ChatRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


def enum_column(enum_cls: type[enum.Enum]) -> SAEnum:
    """Column type persisting an enum by value in a VARCHAR."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )
