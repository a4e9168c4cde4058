"""Admin console Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel

from traveltrek.models.enums import MembershipStatus, PaymentStatus, PlanType, UserRole


class DashboardStats(BaseModel):
    total_users: int
    total_memberships: int
    active_memberships: int
    pending_memberships: int
    expired_memberships: int
    total_destinations: int


class DashboardStatsResponse(BaseModel):
    stats: DashboardStats


class MembershipBrief(BaseModel):
    id: str
    plan_type: PlanType
    status: MembershipStatus
    payment_status: PaymentStatus
    total_days: int
    used_days: int
    start_date: datetime | None = None
    end_date: datetime | None = None

    model_config = {"from_attributes": True}


class AdminUserResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    role: UserRole
    created_at: datetime
    membership: MembershipBrief | None = None

    model_config = {"from_attributes": True}


class AdminUserListResponse(BaseModel):
    users: list[AdminUserResponse]
