"""Manual payment record."""

from datetime import datetime
from decimal import Decimal
import uuid

from sqlalchemy import String, Numeric, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from traveltrek.clock import utcnow
from traveltrek.database import Base
from traveltrek.models.enums import PaymentRecordStatus, enum_column


class Payment(Base):
    """Payment a member reports through the manual payment rail."""

    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # Kept after a pending membership is cancelled
    membership_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("memberships.id", ondelete="SET NULL"), nullable=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    gateway_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[PaymentRecordStatus] = mapped_column(
        enum_column(PaymentRecordStatus), nullable=False, default=PaymentRecordStatus.SUCCESS
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
