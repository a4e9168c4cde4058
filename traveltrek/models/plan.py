"""Plan catalog model."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
import uuid

from sqlalchemy import String, Text, Integer, Numeric, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from traveltrek.clock import utcnow
from traveltrek.database import Base
from traveltrek.models.destination import plan_destinations
from traveltrek.models.enums import PlanType, enum_column

if TYPE_CHECKING:
    from traveltrek.models.destination import Destination


class PlanConfig(Base):
    """Economics of one membership tier."""

    __tablename__ = "plan_configs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    plan_type: Mapped[PlanType] = mapped_column(
        enum_column(PlanType), unique=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Travel days included with the plan
    days: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    destinations: Mapped[list["Destination"]] = relationship(
        "Destination", secondary=plan_destinations, lazy="selectin"
    )
