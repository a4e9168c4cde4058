"""Per-year counter backing membership number allocation."""

from datetime import datetime

from sqlalchemy import Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from traveltrek.clock import utcnow
from traveltrek.database import Base


class MembershipCounter(Base):
    """One row per calendar year, incremented atomically."""

    __tablename__ = "membership_counters"

    year: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    counter: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
