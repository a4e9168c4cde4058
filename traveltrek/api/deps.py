"""Shared FastAPI dependencies."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.database import get_db
from traveltrek.errors import AuthenticationError, PermissionDeniedError
from traveltrek.models import User, UserRole
from traveltrek.services.accounts import AccountService
from traveltrek.services.ai import ConciergeAI, get_concierge
from traveltrek.services.chat import ChatService
from traveltrek.services.membership import MembershipLifecycle
from traveltrek.services.notifications import NotificationDispatcher, get_dispatcher
from traveltrek.services.security import decode_access_token
from traveltrek.services.stores import OtpStore, RateLimiter

bearer_scheme = HTTPBearer(auto_error=False)

SUPPORT_ROLES = (UserRole.ADMIN, UserRole.OPS, UserRole.SUPPORT)
OPERATOR_ROLES = (UserRole.ADMIN, UserRole.OPS)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    claims = decode_access_token(credentials.credentials)
    user = await db.get(User, claims.get("sub"))
    if user is None:
        raise AuthenticationError("User not found")
    return user


def require_roles(*roles: UserRole):
    """Dependency factory admitting only users holding one of `roles`."""

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise PermissionDeniedError("Access denied. Admin privileges required.")
        return user

    return dependency


require_support = require_roles(*SUPPORT_ROLES)
require_operator = require_roles(*OPERATOR_ROLES)


def get_otp_store(request: Request) -> OtpStore:
    return request.app.state.otp_store


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_lifecycle(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_dispatcher),
) -> MembershipLifecycle:
    return MembershipLifecycle(db, notifier)


def get_accounts(
    db: AsyncSession = Depends(get_db),
    otp_store: OtpStore = Depends(get_otp_store),
    notifier: NotificationDispatcher = Depends(get_dispatcher),
) -> AccountService:
    return AccountService(db, otp_store, notifier)


def get_chat(
    db: AsyncSession = Depends(get_db),
    ai: ConciergeAI = Depends(get_concierge),
) -> ChatService:
    return ChatService(db, ai)
