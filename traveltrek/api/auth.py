"""Sign-up, sign-in and password recovery endpoints."""

from fastapi import APIRouter, Depends

from traveltrek.api.deps import get_accounts
from traveltrek.schemas.auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    GoogleAuthRequest,
    LoginRequest,
    MemberLoginRequest,
    PasswordSetupRequired,
    RegisterRequest,
    ResetPasswordRequest,
    SetPasswordRequest,
    TokenResponse,
    UserSummary,
)
from traveltrek.schemas.membership import MessageResponse
from traveltrek.services import accounts
from traveltrek.services.accounts import AccountService, AuthResult

router = APIRouter(prefix="/auth")

FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, you will receive an OTP."


def _token_response(message: str, result: AuthResult, include_membership: bool = True) -> TokenResponse:
    membership = result.membership if include_membership else None
    summary = UserSummary(
        id=result.user.id,
        name=result.user.name,
        email=result.user.email,
        phone=result.user.phone,
        role=result.user.role,
        has_membership=membership is not None if include_membership else None,
        membership_number=membership.membership_number if membership else None,
        membership_status=membership.status if membership else None,
    )
    return TokenResponse(message=message, token=result.token, user=summary)


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    request: RegisterRequest,
    service: AccountService = Depends(get_accounts),
) -> TokenResponse:
    result = await service.register(request)
    return _token_response("User registered successfully", result, include_membership=False)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    service: AccountService = Depends(get_accounts),
) -> TokenResponse:
    result = await service.login(request)
    return _token_response("Login successful", result)


@router.post("/member-login", response_model=TokenResponse | PasswordSetupRequired)
async def member_login(
    request: MemberLoginRequest,
    service: AccountService = Depends(get_accounts),
) -> TokenResponse | PasswordSetupRequired:
    """
    Log in with a Membership ID.

    The first login of an enrolled member answers `needs_password_setup`
    instead of a token; the client then calls /auth/set-password.
    """
    result = await service.member_login(request)
    if isinstance(result, accounts.PasswordSetupRequired):
        return PasswordSetupRequired(
            message="Please set up your password",
            email=result.email,
            membership_number=result.membership_number,
        )
    return _token_response("Login successful", result)


@router.post("/set-password", response_model=TokenResponse)
async def set_password(
    request: SetPasswordRequest,
    service: AccountService = Depends(get_accounts),
) -> TokenResponse:
    result = await service.set_member_password(request)
    return _token_response("Password set successfully", result)


@router.post("/google", response_model=TokenResponse)
async def google_sign_in(
    request: GoogleAuthRequest,
    service: AccountService = Depends(get_accounts),
) -> TokenResponse:
    result = await service.google_auth(request)
    return _token_response("Google authentication successful", result)


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    service: AccountService = Depends(get_accounts),
) -> ForgotPasswordResponse:
    # Same answer whether or not the account exists
    await service.forgot_password(request.email)
    return ForgotPasswordResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    request: ResetPasswordRequest,
    service: AccountService = Depends(get_accounts),
) -> MessageResponse:
    await service.reset_password(request)
    return MessageResponse(message="Password reset successful. You can now login.")
