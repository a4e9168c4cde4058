"""Pydantic schemas for API request/response models."""

from traveltrek.schemas.membership import (
    EnrollRequest,
    EnrollResponse,
    MembershipEnvelope,
    MembershipOverride,
    MembershipResponse,
)
from traveltrek.schemas.plan import PlanResponse, PlanUpdate
from traveltrek.schemas.destination import DestinationCreate, DestinationResponse, DestinationUpdate
from traveltrek.schemas.auth import TokenResponse, UserSummary

__all__ = [
    "EnrollRequest",
    "EnrollResponse",
    "MembershipEnvelope",
    "MembershipOverride",
    "MembershipResponse",
    "PlanResponse",
    "PlanUpdate",
    "DestinationCreate",
    "DestinationResponse",
    "DestinationUpdate",
    "TokenResponse",
    "UserSummary",
]
