"""Member-facing membership endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.api.deps import get_current_user, get_lifecycle
from traveltrek.database import get_db
from traveltrek.models import User
from traveltrek.schemas.membership import (
    ChoosePlanRequest,
    ChoosePlanResponse,
    EnrollRequest,
    EnrollResponse,
    MemberMembershipView,
    MembershipEnvelope,
    MembershipMutationResponse,
    MembershipResponse,
    MessageResponse,
    PaymentDoneRequest,
)
from traveltrek.schemas.plan import PlanListResponse, PlanResponse
from traveltrek.services import plans as plan_catalog
from traveltrek.services.membership import MembershipLifecycle, MembershipSnapshot

router = APIRouter(prefix="/membership")


def _member_view(snapshot: MembershipSnapshot) -> MemberMembershipView:
    membership = snapshot.membership
    return MemberMembershipView(
        id=membership.id,
        plan_type=membership.plan_type,
        membership_number=membership.membership_number,
        start_date=membership.start_date,
        end_date=membership.end_date,
        total_days=membership.total_days,
        used_days=membership.used_days,
        custom_days_added=membership.custom_days_added,
        remaining_days=snapshot.remaining_days,
        status=snapshot.status,
        payment_status=membership.payment_status,
        payment_amount=membership.payment_amount,
        custom_destinations=[d.name for d in membership.custom_destinations],
    )


@router.post("/enroll", response_model=EnrollResponse, status_code=201)
async def enroll(
    request: EnrollRequest,
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
) -> EnrollResponse:
    """
    Public enrollment from the website.

    Creates the account and a PENDING membership. The Membership ID is
    emailed once an operator activates the request.
    """
    user, membership = await lifecycle.enroll(request)
    return EnrollResponse(
        message=(
            "Membership request submitted successfully! Our team will review your "
            "request and send your Membership ID once approved."
        ),
        user_id=user.id,
        membership_id=membership.id,
        name=user.name,
        email=user.email,
        plan_type=membership.plan_type,
        state=membership.state,
        status=membership.status,
    )


@router.get("/plans", response_model=PlanListResponse)
async def list_plans(db: AsyncSession = Depends(get_db)) -> PlanListResponse:
    plans = await plan_catalog.list_plans(db)
    return PlanListResponse(plans=[PlanResponse.model_validate(p) for p in plans])


@router.get("", response_model=MembershipEnvelope)
async def get_membership(
    user: User = Depends(get_current_user),
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
    db: AsyncSession = Depends(get_db),
) -> MembershipEnvelope:
    snapshot = await lifecycle.get_for_user(user.id)
    if snapshot is None:
        plans = await plan_catalog.list_plans(db)
        return MembershipEnvelope(
            membership=None,
            status="NONE",
            message="No active membership. Please choose a plan.",
            plans=[PlanResponse.model_validate(p) for p in plans],
        )

    return MembershipEnvelope(membership=_member_view(snapshot), status=snapshot.status)


@router.post("/choose-plan", response_model=ChoosePlanResponse, status_code=201)
async def choose_plan(
    request: ChoosePlanRequest,
    user: User = Depends(get_current_user),
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
) -> ChoosePlanResponse:
    membership, plan = await lifecycle.choose_plan(user, request.plan_type)
    return ChoosePlanResponse(
        message="Plan selected successfully. Please complete payment.",
        membership=MembershipResponse.model_validate(membership),
        plan_name=plan.name,
        price=plan.price,
    )


@router.post("/cancel", response_model=MessageResponse)
async def cancel_membership(
    user: User = Depends(get_current_user),
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
) -> MessageResponse:
    await lifecycle.cancel(user.id)
    return MessageResponse(message="Membership request cancelled")


@router.post("/payment-done", response_model=MembershipMutationResponse)
async def payment_done(
    request: PaymentDoneRequest,
    user: User = Depends(get_current_user),
    lifecycle: MembershipLifecycle = Depends(get_lifecycle),
) -> MembershipMutationResponse:
    membership = await lifecycle.mark_payment_done(user.id, request)
    return MembershipMutationResponse(
        message="Payment recorded. Your membership will be activated after verification.",
        membership=MembershipResponse.model_validate(membership),
    )
