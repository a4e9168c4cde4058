"""Membership lifecycle: every state transition of a membership record.

    NONE --enroll/choose plan--> PENDING --activate--> ACTIVE --time--> EXPIRED
                                   |
                                   +--reject/cancel--> NONE

EXPIRED is derived on read (see status.derive_status) and persisted
opportunistically; there is no background expiry sweep.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.clock import utcnow
from traveltrek.errors import ConflictError, NotFoundError, StateError
from traveltrek.models import (
    Membership,
    MembershipStatus,
    Payment,
    PaymentRecordStatus,
    PaymentStatus,
    PlanConfig,
    PlanType,
    User,
    UserRole,
)
from traveltrek.schemas.membership import (
    EnrollRequest,
    ExtendRequest,
    MembershipOverride,
    MembershipResponse,
    PaymentDoneRequest,
)
from traveltrek.services import plans as plan_catalog
from traveltrek.services.membership.identifier import allocate_membership_number
from traveltrek.services.membership.status import (
    compute_validity,
    derive_status,
    extend_end_date,
    remaining_days,
)
from traveltrek.services.notifications.dispatch import NotificationDispatcher

logger = structlog.get_logger()

# Attempts at activation when the commit hits a uniqueness race
ACTIVATION_ATTEMPTS = 3


@dataclass
class MembershipSnapshot:
    """A membership read by its owner, with derived fields."""

    membership: Membership
    status: MembershipStatus
    remaining_days: int


@dataclass
class Activation:
    membership: Membership
    membership_number: str


class MembershipLifecycle:
    """
    Owns membership state transitions and entitlement arithmetic.

    Every mutating method runs in one transaction on the given session and
    commits before returning; notifications are queued only after the commit.
    """

    def __init__(
        self,
        db: AsyncSession,
        notifier: NotificationDispatcher | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.notifier = notifier or NotificationDispatcher()
        self.clock = clock

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _get(self, membership_id: str, for_update: bool = False) -> Membership:
        stmt = select(Membership).where(Membership.id == membership_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        membership = result.scalar_one_or_none()
        if membership is None:
            raise NotFoundError("Membership not found")
        return membership

    async def _get_for_user(self, user_id: str) -> Membership | None:
        result = await self.db.execute(select(Membership).where(Membership.user_id == user_id))
        return result.scalar_one_or_none()

    async def _require_for_user(self, user_id: str) -> Membership:
        membership = await self._get_for_user(user_id)
        if membership is None:
            raise NotFoundError("No membership found")
        return membership

    # ------------------------------------------------------------------
    # Member-facing operations
    # ------------------------------------------------------------------

    async def enroll(self, request: EnrollRequest) -> tuple[User, Membership]:
        """Create a password-less user and a PENDING membership together."""
        email = request.email.lower()
        existing = await self.db.execute(select(User.id).where(func.lower(User.email) == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("An account with this email already exists. Please login.")

        plan = await plan_catalog.get_active_plan(self.db, request.plan_type)

        user = User(
            name=request.name,
            email=email,
            phone=request.phone,
            password_hash=None,
            password_set=False,
            role=UserRole.USER,
            google_id=None,
            fcm_token=None,
        )
        membership = self._new_pending(plan)
        membership.state = request.state
        membership.city = request.city
        membership.user = user

        self.db.add_all([user, membership])
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent enrollment for the same email
            await self.db.rollback()
            raise ConflictError("An account with this email already exists. Please login.")

        logger.info(
            "Membership enrollment received",
            user_id=user.id,
            membership_id=membership.id,
            plan_type=plan.plan_type.value,
        )
        self.notifier.welcome(user)
        return user, membership

    async def choose_plan(self, user: User, plan_type: PlanType | str) -> tuple[Membership, PlanConfig]:
        """Start (or restart after expiry) a PENDING membership for `user`."""
        plan = await plan_catalog.get_active_plan(self.db, plan_type)
        existing = await self._get_for_user(user.id)

        if existing is not None:
            status = await self._refresh_status(existing)
            if status == MembershipStatus.ACTIVE:
                raise ConflictError("You already have an active membership.")
            if status == MembershipStatus.PENDING:
                raise ConflictError(
                    "You already have a pending membership request.",
                    membership=MembershipResponse.model_validate(existing).model_dump(mode="json"),
                )

        if existing is None:
            membership = self._new_pending(plan)
            membership.user = user
            self.db.add(membership)
        else:
            membership = existing
            self._reset_to_pending(membership, plan)

        await self.db.commit()
        logger.info(
            "Plan selected",
            user_id=user.id,
            membership_id=membership.id,
            plan_type=plan.plan_type.value,
        )
        return membership, plan

    async def get_for_user(self, user_id: str) -> MembershipSnapshot | None:
        """The user's membership with derived status, or None."""
        membership = await self._get_for_user(user_id)
        if membership is None:
            return None

        status = await self._refresh_status(membership)
        return MembershipSnapshot(
            membership=membership,
            status=status,
            remaining_days=remaining_days(membership),
        )

    async def cancel(self, user_id: str) -> None:
        membership = await self._require_for_user(user_id)
        if membership.status != MembershipStatus.PENDING:
            raise StateError("Cannot cancel active or expired membership")

        await self.db.delete(membership)
        await self.db.commit()
        logger.info("Pending membership cancelled", user_id=user_id, membership_id=membership.id)

    async def mark_payment_done(self, user_id: str, request: PaymentDoneRequest) -> Membership:
        """
        Record a manual payment. The membership stays PENDING until an
        operator activates it.
        """
        membership = await self._require_for_user(user_id)
        if membership.status != MembershipStatus.PENDING:
            raise StateError("Membership is not in pending state")

        payment = Payment(
            user_id=user_id,
            membership_id=membership.id,
            amount=membership.payment_amount or 0,
            method=request.payment_method,
            gateway_reference=request.transaction_id,
            notes=request.notes,
            status=PaymentRecordStatus.SUCCESS,
        )
        self.db.add(payment)
        membership.payment_status = PaymentStatus.PAID
        await self.db.commit()

        logger.info(
            "Manual payment recorded",
            user_id=user_id,
            membership_id=membership.id,
            payment_id=payment.id,
        )
        return membership

    # ------------------------------------------------------------------
    # Operator operations
    # ------------------------------------------------------------------

    async def activate(self, membership_id: str) -> Activation:
        """
        PENDING (or EXPIRED) -> ACTIVE with a fresh membership number.

        Number allocation and the status change commit together. A uniqueness
        failure at commit rolls everything back and the whole activation is
        retried.
        """
        for attempt in range(1, ACTIVATION_ATTEMPTS + 1):
            try:
                activation = await self._activate_once(membership_id)
                break
            except IntegrityError as e:
                await self.db.rollback()
                logger.warning(
                    "Activation conflicted, retrying",
                    membership_id=membership_id,
                    attempt=attempt,
                    error=str(e),
                )
        else:
            raise ConflictError("Could not allocate a membership number, please retry")

        membership = activation.membership
        logger.info(
            "Membership activated",
            membership_id=membership.id,
            membership_number=activation.membership_number,
            end_date=membership.end_date.isoformat(),
        )
        self.notifier.activation(membership.user, activation.membership_number, membership.plan_type)
        return activation

    async def _activate_once(self, membership_id: str) -> Activation:
        membership = await self._get(membership_id, for_update=True)
        now = self.clock()
        if derive_status(membership, now) == MembershipStatus.ACTIVE:
            raise ConflictError("Membership is already active")

        membership_number = await allocate_membership_number(self.db, now.year)
        start_date, end_date = compute_validity(membership.plan_type, now)

        membership.membership_number = membership_number
        membership.status = MembershipStatus.ACTIVE
        membership.payment_status = PaymentStatus.PAID
        membership.start_date = start_date
        membership.end_date = end_date
        membership.activated_at = now

        await self.db.commit()
        return Activation(membership=membership, membership_number=membership_number)

    async def reject(self, membership_id: str, reason: str | None = None) -> None:
        """Delete a PENDING request. The reason goes to the audit log and the applicant."""
        membership = await self._get(membership_id)
        if membership.status != MembershipStatus.PENDING:
            raise StateError("Only pending membership requests can be rejected")

        user = membership.user
        await self.db.delete(membership)
        await self.db.commit()

        logger.info(
            "Membership request rejected",
            membership_id=membership_id,
            user_id=user.id,
            reason=reason,
        )
        self.notifier.rejection(user, reason)

    async def extend(self, membership_id: str, request: ExtendRequest) -> Membership:
        """Add days to the entitlement and/or push the end date out."""
        membership = await self._get(membership_id, for_update=True)

        if request.additional_days:
            membership.total_days += request.additional_days
        if request.extend_end_date and membership.end_date is not None:
            membership.end_date = extend_end_date(membership.end_date, request.extend_end_date)

        await self.db.commit()
        logger.info(
            "Membership extended",
            membership_id=membership_id,
            additional_days=request.additional_days,
            extend_end_date=request.extend_end_date,
        )
        return membership

    async def apply_override(self, membership_id: str, override: MembershipOverride) -> Membership:
        """Replace custom days and/or custom destinations; omitted fields stay."""
        membership = await self._get(membership_id, for_update=True)
        supplied = override.model_fields_set

        if "custom_days_added" in supplied:
            membership.custom_days_added = override.custom_days_added
        if "custom_destination_ids" in supplied:
            membership.custom_destinations = await plan_catalog.load_destinations(
                self.db, override.custom_destination_ids or []
            )

        await self.db.commit()
        logger.info(
            "Membership override applied",
            membership_id=membership_id,
            fields=sorted(supplied),
        )
        return membership

    async def record_usage(self, membership_id: str, days: int) -> Membership:
        """Consume travel days. Refuses anything beyond the entitlement."""
        membership = await self._get(membership_id, for_update=True)

        status = await self._refresh_status(membership, commit=False)
        if status != MembershipStatus.ACTIVE:
            raise StateError("Travel days can only be used on an active membership")
        if days <= 0:
            raise StateError("Used days must be positive")
        if membership.used_days + days > membership.entitled_days:
            raise StateError(
                "Not enough travel days remaining",
                remaining_days=remaining_days(membership),
            )

        membership.used_days += days
        await self.db.commit()
        logger.info(
            "Travel days used",
            membership_id=membership_id,
            days=days,
            remaining_days=remaining_days(membership),
        )
        return membership

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _new_pending(plan: PlanConfig) -> Membership:
        return Membership(
            plan_type=plan.plan_type,
            total_days=plan.days,
            used_days=0,
            custom_days_added=0,
            payment_amount=plan.price,
            status=MembershipStatus.PENDING,
            payment_status=PaymentStatus.UNPAID,
            membership_number=None,
            start_date=None,
            end_date=None,
            activated_at=None,
            state=None,
            city=None,
            custom_destinations=[],
        )

    @staticmethod
    def _reset_to_pending(membership: Membership, plan: PlanConfig) -> None:
        membership.plan_type = plan.plan_type
        membership.total_days = plan.days
        membership.payment_amount = plan.price
        membership.status = MembershipStatus.PENDING
        membership.payment_status = PaymentStatus.UNPAID
        membership.membership_number = None
        membership.start_date = None
        membership.end_date = None
        membership.activated_at = None
        membership.used_days = 0

    async def _refresh_status(self, membership: Membership, commit: bool = True) -> MembershipStatus:
        """Persist lazy expiry when the derived status moved on."""
        status = derive_status(membership, self.clock())
        if status != membership.status:
            logger.info(
                "Membership expired",
                membership_id=membership.id,
                end_date=membership.end_date.isoformat() if membership.end_date else None,
            )
            membership.status = status
            if commit:
                await self.db.commit()
        return status
