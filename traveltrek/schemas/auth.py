"""Authentication Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, EmailStr, Field, model_validator

from traveltrek.models.enums import MembershipStatus, UserRole


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=10, max_length=30)
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class MemberLoginRequest(BaseModel):
    membership_number: str = Field(min_length=1)
    password: str | None = None


class SetPasswordRequest(BaseModel):
    membership_number: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "SetPasswordRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class GoogleAuthRequest(BaseModel):
    email: EmailStr
    google_id: str = Field(min_length=1)
    name: str | None = None
    id_token: str | None = None
    photo_url: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)


class UserSummary(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    role: UserRole
    has_membership: bool | None = None
    membership_number: str | None = None
    membership_status: MembershipStatus | None = None


class TokenResponse(BaseModel):
    message: str
    token: str
    token_type: Literal["bearer"] = "bearer"
    user: UserSummary


class PasswordSetupRequired(BaseModel):
    needs_password_setup: Literal[True] = True
    message: str
    email: str
    membership_number: str


class ForgotPasswordResponse(BaseModel):
    message: str
