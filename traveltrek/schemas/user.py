"""Profile Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from traveltrek.schemas.common import reject_null


class ProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ProfileEnvelope(BaseModel):
    message: str | None = None
    user: ProfileResponse


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    phone: str | None = Field(default=None, min_length=10, max_length=30)

    @field_validator("name", "phone")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class FcmTokenRequest(BaseModel):
    fcm_token: str = Field(min_length=1)


class ProfileChangeRequest(BaseModel):
    """Ask for an OTP before changing a sensitive profile field."""

    field: Literal["name", "phone"]
    new_value: str = Field(min_length=1)


class ProfileChangeVerify(BaseModel):
    field: Literal["name", "phone"]
    otp: str = Field(min_length=1)


class PasswordChangeRequest(BaseModel):
    new_password: str = Field(min_length=6, max_length=128)


class PasswordChangeVerify(BaseModel):
    otp: str = Field(min_length=1)


class OtpSentResponse(BaseModel):
    message: str
    field: str | None = None
