"""Membership database model."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
import uuid

from sqlalchemy import String, Integer, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from traveltrek.clock import utcnow
from traveltrek.database import Base
from traveltrek.models.destination import membership_destinations
from traveltrek.models.enums import (
    MembershipStatus,
    PaymentStatus,
    PlanType,
    enum_column,
)

if TYPE_CHECKING:
    from traveltrek.models.destination import Destination
    from traveltrek.models.user import User


class Membership(Base):
    """A user's membership and its travel-day entitlement."""

    __tablename__ = "memberships"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    plan_type: Mapped[PlanType] = mapped_column(enum_column(PlanType), nullable=False)

    # 10-digit YYYYNNNNNN number, allocated on activation
    membership_number: Mapped[str | None] = mapped_column(
        String(10), unique=True, nullable=True
    )

    status: Mapped[MembershipStatus] = mapped_column(
        enum_column(MembershipStatus), nullable=False, default=MembershipStatus.PENDING, index=True
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        enum_column(PaymentStatus), nullable=False, default=PaymentStatus.UNPAID
    )
    payment_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    # Entitlement
    total_days: Mapped[int] = mapped_column(Integer, nullable=False)
    used_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    custom_days_added: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Validity, set only at activation
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Geography captured at enrollment
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="membership", lazy="selectin")
    custom_destinations: Mapped[list["Destination"]] = relationship(
        "Destination", secondary=membership_destinations, lazy="selectin"
    )

    @property
    def entitled_days(self) -> int:
        return self.total_days + (self.custom_days_added or 0)
