"""Destination catalog model and its association tables."""

from datetime import datetime
import uuid

from sqlalchemy import Column, ForeignKey, JSON, String, Table, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from traveltrek.clock import utcnow
from traveltrek.database import Base
from traveltrek.models.enums import Difficulty, DestinationStatus, enum_column

# Default destinations included with a plan
plan_destinations = Table(
    "plan_destinations",
    Base.metadata,
    Column(
        "plan_id",
        String(36),
        ForeignKey("plan_configs.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "destination_id",
        String(36),
        ForeignKey("destinations.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

# Operator-curated destinations granted to a single membership
membership_destinations = Table(
    "membership_destinations",
    Base.metadata,
    Column(
        "membership_id",
        String(36),
        ForeignKey("memberships.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "destination_id",
        String(36),
        ForeignKey("destinations.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Destination(Base):
    """A curated travel destination."""

    __tablename__ = "destinations"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)

    # Ordered month names, e.g. ["October", "November"]
    best_months: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    difficulty: Mapped[Difficulty] = mapped_column(
        enum_column(Difficulty), nullable=False, default=Difficulty.EASY
    )
    status: Mapped[DestinationStatus] = mapped_column(
        enum_column(DestinationStatus),
        nullable=False,
        default=DestinationStatus.AVAILABLE,
    )
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def is_good_month(self, month_name: str) -> bool:
        return month_name in (self.best_months or [])
