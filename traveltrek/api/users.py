"""Member profile endpoints."""

from fastapi import APIRouter, Depends

from traveltrek.api.deps import get_accounts, get_current_user
from traveltrek.models import User
from traveltrek.schemas.membership import MessageResponse
from traveltrek.schemas.user import (
    FcmTokenRequest,
    OtpSentResponse,
    PasswordChangeRequest,
    PasswordChangeVerify,
    ProfileChangeRequest,
    ProfileChangeVerify,
    ProfileEnvelope,
    ProfileResponse,
    ProfileUpdate,
)
from traveltrek.services.accounts import AccountService

router = APIRouter(prefix="/user")


@router.get("/profile", response_model=ProfileEnvelope)
async def get_profile(user: User = Depends(get_current_user)) -> ProfileEnvelope:
    return ProfileEnvelope(user=ProfileResponse.model_validate(user))


@router.put("/profile", response_model=ProfileEnvelope)
async def update_profile(
    patch: ProfileUpdate,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_accounts),
) -> ProfileEnvelope:
    user = await service.update_profile(user, patch)
    return ProfileEnvelope(
        message="Profile updated successfully",
        user=ProfileResponse.model_validate(user),
    )


@router.post("/fcm-token", response_model=MessageResponse)
async def register_fcm_token(
    request: FcmTokenRequest,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_accounts),
) -> MessageResponse:
    await service.update_fcm_token(user, request.fcm_token)
    return MessageResponse(message="FCM token updated")


@router.post("/profile/request-change", response_model=OtpSentResponse)
async def request_profile_change(
    request: ProfileChangeRequest,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_accounts),
) -> OtpSentResponse:
    await service.request_profile_change(user, request.field, request.new_value)
    return OtpSentResponse(message="OTP sent to your email", field=request.field)


@router.post("/profile/verify-change", response_model=ProfileEnvelope)
async def verify_profile_change(
    request: ProfileChangeVerify,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_accounts),
) -> ProfileEnvelope:
    user = await service.verify_profile_change(user, request.field, request.otp)
    return ProfileEnvelope(
        message=f"{request.field.capitalize()} updated successfully",
        user=ProfileResponse.model_validate(user),
    )


@router.post("/password/request-change", response_model=OtpSentResponse)
async def request_password_change(
    request: PasswordChangeRequest,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_accounts),
) -> OtpSentResponse:
    await service.request_password_change(user, request.new_password)
    return OtpSentResponse(message="OTP sent to your email")


@router.post("/password/verify-change", response_model=MessageResponse)
async def verify_password_change(
    request: PasswordChangeVerify,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_accounts),
) -> MessageResponse:
    await service.verify_password_change(user, request.otp)
    return MessageResponse(message="Password changed successfully")
