"""User database model."""

from datetime import datetime
from typing import TYPE_CHECKING
import uuid

from sqlalchemy import String, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from traveltrek.clock import utcnow
from traveltrek.database import Base
from traveltrek.models.enums import UserRole, enum_column

if TYPE_CHECKING:
    from traveltrek.models.membership import Membership


class User(Base):
    """Account for members and console operators."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False, default="")

    # Enrolled members have no password until they pick one at first login
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_set: Mapped[bool] = mapped_column(Boolean, default=False)

    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole), nullable=False, default=UserRole.USER
    )

    google_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    fcm_token: Mapped[str | None] = mapped_column(String(512), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    membership: Mapped["Membership | None"] = relationship(
        "Membership", back_populates="user", uselist=False, lazy="selectin"
    )

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.OPS, UserRole.SUPPORT)
