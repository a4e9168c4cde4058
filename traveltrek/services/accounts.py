"""Accounts: sign-up, sign-in and OTP-gated credential changes."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.clock import utcnow
from traveltrek.errors import (
    AuthenticationError,
    ConflictError,
    DuplicateAccountError,
    NotFoundError,
    ValidationError,
)
from traveltrek.models import Membership, MembershipStatus, User, UserRole
from traveltrek.schemas.auth import (
    GoogleAuthRequest,
    LoginRequest,
    MemberLoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    SetPasswordRequest,
)
from traveltrek.schemas.user import ProfileUpdate
from traveltrek.services.membership.status import derive_status
from traveltrek.services.notifications.dispatch import NotificationDispatcher
from traveltrek.services.security import create_access_token, hash_password, verify_password
from traveltrek.services.stores.otp import OtpStore

logger = structlog.get_logger()

FORGOT_PASSWORD = "forgot_password"
PASSWORD_CHANGE = "password"
PROFILE_FIELDS = ("name", "phone")

INVALID_OTP = "Invalid or expired OTP"


@dataclass
class AuthResult:
    user: User
    token: str
    membership: Membership | None = None


@dataclass
class PasswordSetupRequired:
    email: str
    membership_number: str


class AccountService:
    def __init__(
        self,
        db: AsyncSession,
        otp_store: OtpStore,
        notifier: NotificationDispatcher | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.otp_store = otp_store
        self.notifier = notifier or NotificationDispatcher()
        self.clock = clock

    async def _find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    async def _membership_by_number(self, membership_number: str) -> Membership | None:
        result = await self.db.execute(
            select(Membership).where(Membership.membership_number == membership_number)
        )
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Sign-up / sign-in
    # ------------------------------------------------------------------

    async def register(self, request: RegisterRequest) -> AuthResult:
        if await self._find_by_email(request.email) is not None:
            raise DuplicateAccountError("Email already registered")

        user = User(
            name=request.name,
            email=request.email.lower(),
            phone=request.phone,
            password_hash=hash_password(request.password),
            password_set=True,
            role=UserRole.USER,
            google_id=None,
            fcm_token=None,
            membership=None,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateAccountError("Email already registered")

        logger.info("User registered", user_id=user.id)
        self.notifier.welcome(user)
        return AuthResult(user=user, token=create_access_token(user.id, user.email))

    async def login(self, request: LoginRequest) -> AuthResult:
        user = await self._find_by_email(request.email)
        if user is None or not verify_password(request.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        logger.info("User logged in", user_id=user.id)
        return AuthResult(
            user=user,
            token=create_access_token(user.id, user.email),
            membership=user.membership,
        )

    async def member_login(self, request: MemberLoginRequest) -> AuthResult | PasswordSetupRequired:
        """
        Sign in with a membership number.

        Members enrolled through the public form have no password yet; the
        first login tells them to choose one instead of issuing a token.
        """
        membership = await self._membership_by_number(request.membership_number)
        if membership is None or membership.user is None:
            raise AuthenticationError("Invalid Membership ID")

        status = derive_status(membership, self.clock())
        if status != MembershipStatus.ACTIVE:
            raise AuthenticationError(
                "Membership is not active yet. Please wait for admin approval.",
                status=status.value,
            )

        user = membership.user
        if not user.password_set:
            return PasswordSetupRequired(email=user.email, membership_number=request.membership_number)

        if not request.password:
            raise ValidationError("Password is required")
        if not verify_password(request.password, user.password_hash):
            raise AuthenticationError("Invalid password")

        logger.info("Member logged in", user_id=user.id, membership_number=request.membership_number)
        return AuthResult(
            user=user,
            token=create_access_token(user.id, user.email, request.membership_number),
            membership=membership,
        )

    async def set_member_password(self, request: SetPasswordRequest) -> AuthResult:
        membership = await self._membership_by_number(request.membership_number)
        if membership is None or membership.user is None:
            raise NotFoundError("Membership not found")

        user = membership.user
        if user.email.lower() != request.email.lower():
            raise ValidationError("Email does not match membership records")
        if user.password_set:
            raise ConflictError("Password already set. Please login or use forgot password.")

        user.password_hash = hash_password(request.password)
        user.password_set = True
        await self.db.commit()

        logger.info("Member password set", user_id=user.id)
        return AuthResult(
            user=user,
            token=create_access_token(user.id, user.email, request.membership_number),
            membership=membership,
        )

    async def google_auth(self, request: GoogleAuthRequest) -> AuthResult:
        """Find or create the user for a Google identity and link it."""
        user = await self._find_by_email(request.email)
        created = False

        if user is None:
            user = User(
                name=request.name or request.email.split("@")[0],
                email=request.email.lower(),
                phone="",
                password_hash=None,
                password_set=False,
                google_id=request.google_id,
                role=UserRole.USER,
                fcm_token=None,
                membership=None,
            )
            self.db.add(user)
            created = True
        elif not user.google_id:
            user.google_id = request.google_id

        await self.db.commit()
        if created:
            logger.info("User created from Google sign-in", user_id=user.id)
            self.notifier.welcome(user)

        return AuthResult(
            user=user,
            token=create_access_token(user.id, user.email),
            membership=user.membership,
        )

    # ------------------------------------------------------------------
    # Password recovery
    # ------------------------------------------------------------------

    async def forgot_password(self, email: str) -> None:
        """Send a reset code. Silent when the email is unknown."""
        user = await self._find_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        code = self.otp_store.generate()
        self.otp_store.store(user.id, FORGOT_PASSWORD, user.email, code)
        self.notifier.otp(user, code, "password reset")
        logger.info("Password reset code issued", user_id=user.id)

    async def reset_password(self, request: ResetPasswordRequest) -> None:
        user = await self._find_by_email(request.email)
        if user is None:
            raise ValidationError("Invalid request")

        result = self.otp_store.verify(user.id, FORGOT_PASSWORD, request.otp)
        if not result.valid:
            raise ValidationError(INVALID_OTP)

        user.password_hash = hash_password(request.new_password)
        user.password_set = True
        await self.db.commit()
        logger.info("Password reset", user_id=user.id)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def update_profile(self, user: User, patch: ProfileUpdate) -> User:
        for field, value in patch.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        await self.db.commit()
        return user

    async def update_fcm_token(self, user: User, fcm_token: str) -> None:
        user.fcm_token = fcm_token
        await self.db.commit()
        logger.info("Push token updated", user_id=user.id)

    async def request_profile_change(self, user: User, field: str, new_value: str) -> None:
        if field not in PROFILE_FIELDS:
            raise ValidationError("Invalid field. Only name and phone require OTP.")
        new_value = new_value.strip()
        if not new_value:
            raise ValidationError("New value is required")

        code = self.otp_store.generate()
        self.otp_store.store(user.id, field, new_value, code)
        self.notifier.otp(user, code, field)
        logger.info("Profile change code issued", user_id=user.id, field=field)

    async def verify_profile_change(self, user: User, field: str, otp: str) -> User:
        if field not in PROFILE_FIELDS:
            raise ValidationError("Invalid field. Only name and phone require OTP.")

        result = self.otp_store.verify(user.id, field, otp)
        if not result.valid:
            raise ValidationError(INVALID_OTP)

        setattr(user, field, result.pending_value)
        await self.db.commit()
        logger.info("Profile field changed", user_id=user.id, field=field)
        return user

    async def request_password_change(self, user: User, new_password: str) -> None:
        # Only the hash is held in memory while the code is outstanding
        code = self.otp_store.generate()
        self.otp_store.store(user.id, PASSWORD_CHANGE, hash_password(new_password), code)
        self.notifier.otp(user, code, "password")
        logger.info("Password change code issued", user_id=user.id)

    async def verify_password_change(self, user: User, otp: str) -> None:
        result = self.otp_store.verify(user.id, PASSWORD_CHANGE, otp)
        if not result.valid:
            raise ValidationError(INVALID_OTP)

        user.password_hash = result.pending_value
        user.password_set = True
        await self.db.commit()
        logger.info("Password changed", user_id=user.id)
