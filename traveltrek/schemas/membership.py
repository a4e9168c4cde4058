"""Membership Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

from traveltrek.models.enums import MembershipStatus, PaymentStatus, PlanType
from traveltrek.schemas.common import reject_null
from traveltrek.schemas.plan import PlanResponse


class EnrollRequest(BaseModel):
    """Public enrollment from the website join form."""

    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(min_length=10, max_length=30)
    plan_type: PlanType
    state: str | None = None
    city: str | None = None


class EnrollResponse(BaseModel):
    success: bool = True
    message: str
    user_id: str
    membership_id: str
    name: str
    email: str
    plan_type: PlanType
    state: str | None = None
    status: MembershipStatus


class ChoosePlanRequest(BaseModel):
    plan_type: PlanType


class MembershipResponse(BaseModel):
    """Stored membership record."""

    id: str
    user_id: str
    plan_type: PlanType
    membership_number: str | None = None
    status: MembershipStatus
    payment_status: PaymentStatus
    payment_amount: Decimal | None = None
    total_days: int
    used_days: int
    custom_days_added: int
    start_date: datetime | None = None
    end_date: datetime | None = None
    activated_at: datetime | None = None
    state: str | None = None
    city: str | None = None

    model_config = {"from_attributes": True}


class MemberMembershipView(BaseModel):
    """Membership as the member sees it, with derived fields."""

    id: str
    plan_type: PlanType
    membership_number: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    total_days: int
    used_days: int
    custom_days_added: int
    remaining_days: int = Field(description="total + custom - used, may be negative")
    status: MembershipStatus
    payment_status: PaymentStatus
    payment_amount: Decimal | None = None
    custom_destinations: list[str] = Field(
        default_factory=list, description="Names of extra destinations granted"
    )


class MembershipEnvelope(BaseModel):
    membership: MemberMembershipView | None
    status: MembershipStatus | Literal["NONE"]
    message: str | None = None
    plans: list[PlanResponse] | None = None


class ChoosePlanResponse(BaseModel):
    message: str
    membership: MembershipResponse
    plan_name: str
    price: Decimal


class PaymentDoneRequest(BaseModel):
    payment_method: str | None = None
    transaction_id: str | None = None
    notes: str | None = None


class MessageResponse(BaseModel):
    message: str


# Operator requests


class ActivateResponse(BaseModel):
    message: str
    membership_number: str
    membership: MembershipResponse


class RejectRequest(BaseModel):
    reason: str | None = None


class RejectResponse(BaseModel):
    message: str
    reason: str | None = None


class ExtendRequest(BaseModel):
    additional_days: int = Field(default=0, ge=0, description="Added to total days")
    extend_end_date: int = Field(default=0, ge=0, description="Days added to the end date")


class MembershipOverride(BaseModel):
    """
    Operator override. Supplied fields replace the stored value outright;
    omitted fields are left untouched. A null destination list clears it.
    """

    custom_days_added: int | None = Field(default=None, ge=0)
    custom_destination_ids: list[str] | None = None

    @field_validator("custom_days_added")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class UsageRequest(BaseModel):
    days: int = Field(gt=0)


class MembershipMutationResponse(BaseModel):
    message: str
    membership: MembershipResponse


class UserBrief(BaseModel):
    id: str
    name: str
    email: str
    phone: str

    model_config = {"from_attributes": True}


class AdminMembershipResponse(MembershipResponse):
    user: UserBrief | None = None
    custom_destination_ids: list[str] = Field(default_factory=list)
    remaining_days: int | None = None


class AdminMembershipListResponse(BaseModel):
    memberships: list[AdminMembershipResponse]
