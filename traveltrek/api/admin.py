"""Operator console endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.api.deps import get_lifecycle, require_operator, require_support
from traveltrek.clock import utcnow
from traveltrek.database import get_db
from traveltrek.errors import NotFoundError
from traveltrek.models import Membership, MembershipStatus, User
from traveltrek.schemas.admin import (
    AdminUserListResponse,
    AdminUserResponse,
    DashboardStatsResponse,
)
from traveltrek.schemas.destination import (
    DestinationCreate,
    DestinationEnvelope,
    DestinationResponse,
    DestinationUpdate,
)
from traveltrek.schemas.membership import (
    ActivateResponse,
    AdminMembershipListResponse,
    AdminMembershipResponse,
    ExtendRequest,
    MembershipMutationResponse,
    MembershipOverride,
    MembershipResponse,
    MessageResponse,
    RejectRequest,
    RejectResponse,
    UsageRequest,
    UserBrief,
)
from traveltrek.schemas.plan import PlanEnvelope, PlanListResponse, PlanResponse, PlanUpdate
from traveltrek.services import dashboard
from traveltrek.services import destinations as destination_catalog
from traveltrek.services import plans as plan_catalog
from traveltrek.services.membership import MembershipLifecycle, derive_status, remaining_days

router = APIRouter(prefix="/admin")


def _admin_membership(membership: Membership) -> AdminMembershipResponse:
    data = MembershipResponse.model_validate(membership).model_dump()
    data["status"] = derive_status(membership, utcnow())
    return AdminMembershipResponse(
        **data,
        user=UserBrief.model_validate(membership.user) if membership.user else None,
        custom_destination_ids=[d.id for d in membership.custom_destinations],
        remaining_days=remaining_days(membership),
    )


# ----------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_stats(
    _: User = Depends(require_support),
    db: AsyncSession = Depends(get_db),
) -> DashboardStatsResponse:
    return DashboardStatsResponse(stats=await dashboard.get_stats(db))


@router.get("/users", response_model=AdminUserListResponse)
async def list_users(
    _: User = Depends(require_support),
    db: AsyncSession = Depends(get_db),
) -> AdminUserListResponse:
    users = await dashboard.list_users(db)
    return AdminUserListResponse(users=[AdminUserResponse.model_validate(u) for u in users])


@router.get("/users/{user_id}", response_model=AdminUserResponse)
async def get_user(
    user_id: str,
    _: User = Depends(require_support),
    db: AsyncSession = Depends(get_db),
) -> AdminUserResponse:
    user = await dashboard.get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return AdminUserResponse.model_validate(user)


# ----------------------------------------------------------------------
# Memberships
# ----------------------------------------------------------------------


@router.get("/memberships", response_model=AdminMembershipListResponse)
async def list_memberships(
    status: MembershipStatus | None = None,
    _: User = Depends(require_support),
    db: AsyncSession = Depends(get_db),
) -> AdminMembershipListResponse:
    memberships = await dashboard.list_memberships(db, status=status)
    return AdminMembershipListResponse(memberships=[_admin_membership(m) for m in memberships])


@router.post("/memberships/{membership_id}/activate", response_model=ActivateResponse)
async def activate_membership(
    membership_id: str,
    _: User = Depends(require_operator),
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
) -> ActivateResponse:
    """
    Approve a membership request.

    Allocates the Membership ID, starts the validity period and queues the
    email, WhatsApp and push notices.
    """
    activation = await lifecycle.activate(membership_id)
    return ActivateResponse(
        message="Membership activated successfully",
        membership_number=activation.membership_number,
        membership=MembershipResponse.model_validate(activation.membership),
    )


@router.post("/memberships/{membership_id}/reject", response_model=RejectResponse)
async def reject_membership(
    membership_id: str,
    request: RejectRequest | None = None,
    _: User = Depends(require_operator),
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
) -> RejectResponse:
    reason = request.reason if request else None
    await lifecycle.reject(membership_id, reason)
    return RejectResponse(message="Membership request rejected", reason=reason)


@router.post("/memberships/{membership_id}/extend", response_model=MembershipMutationResponse)
async def extend_membership(
    membership_id: str,
    request: ExtendRequest,
    _: User = Depends(require_operator),
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
) -> MembershipMutationResponse:
    membership = await lifecycle.extend(membership_id, request)
    return MembershipMutationResponse(
        message="Membership extended successfully",
        membership=MembershipResponse.model_validate(membership),
    )


@router.post("/memberships/{membership_id}/usage", response_model=MembershipMutationResponse)
async def record_usage(
    membership_id: str,
    request: UsageRequest,
    _: User = Depends(require_operator),
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
) -> MembershipMutationResponse:
    membership = await lifecycle.record_usage(membership_id, request.days)
    return MembershipMutationResponse(
        message="Travel days recorded",
        membership=MembershipResponse.model_validate(membership),
    )


@router.put("/memberships/{membership_id}", response_model=AdminMembershipResponse)
async def override_membership(
    membership_id: str,
    override: MembershipOverride,
    _: User = Depends(require_operator),
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
) -> AdminMembershipResponse:
    membership = await lifecycle.apply_override(membership_id, override)
    return _admin_membership(membership)


# ----------------------------------------------------------------------
# Plans
# ----------------------------------------------------------------------


@router.get("/plans", response_model=PlanListResponse)
async def list_all_plans(
    _: User = Depends(require_support),
    db: AsyncSession = Depends(get_db),
) -> PlanListResponse:
    plans = await plan_catalog.list_plans(db, active_only=False)
    return PlanListResponse(plans=[PlanResponse.model_validate(p) for p in plans])


@router.put("/plans/{plan_id}", response_model=PlanEnvelope)
async def update_plan(
    plan_id: str,
    patch: PlanUpdate,
    _: User = Depends(require_operator),
    db: AsyncSession = Depends(get_db),
) -> PlanEnvelope:
    plan = await plan_catalog.update_plan(db, plan_id, patch)
    return PlanEnvelope(message="Plan updated successfully", plan=PlanResponse.model_validate(plan))


# ----------------------------------------------------------------------
# Destinations
# ----------------------------------------------------------------------


@router.post("/destinations", response_model=DestinationEnvelope, status_code=201)
async def create_destination(
    data: DestinationCreate,
    _: User = Depends(require_operator),
    db: AsyncSession = Depends(get_db),
) -> DestinationEnvelope:
    destination = await destination_catalog.create_destination(db, data)
    return DestinationEnvelope(
        message="Destination created successfully",
        destination=DestinationResponse.model_validate(destination),
    )


@router.put("/destinations/{destination_id}", response_model=DestinationEnvelope)
async def update_destination(
    destination_id: str,
    patch: DestinationUpdate,
    _: User = Depends(require_operator),
    db: AsyncSession = Depends(get_db),
) -> DestinationEnvelope:
    destination = await destination_catalog.update_destination(db, destination_id, patch)
    return DestinationEnvelope(
        message="Destination updated successfully",
        destination=DestinationResponse.model_validate(destination),
    )


@router.delete("/destinations/{destination_id}", response_model=MessageResponse)
async def delete_destination(
    destination_id: str,
    _: User = Depends(require_operator),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    await destination_catalog.delete_destination(db, destination_id)
    return MessageResponse(message="Destination deleted successfully")
