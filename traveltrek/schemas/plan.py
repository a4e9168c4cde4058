"""Plan catalog Pydantic schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from traveltrek.models.enums import PlanType
from traveltrek.schemas.common import reject_null
from traveltrek.schemas.destination import DestinationResponse


class PlanResponse(BaseModel):
    """One membership tier."""

    id: str
    plan_type: PlanType
    name: str
    description: str | None = None
    days: int
    price: Decimal
    is_active: bool
    destinations: list[DestinationResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class PlanUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body change.

    `destination_ids: null` clears the plan's destinations, as `[]` does.
    """

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    days: int | None = Field(default=None, ge=0)
    price: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None
    destination_ids: list[str] | None = None

    @field_validator("name", "days", "price", "is_active")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class PlanListResponse(BaseModel):
    plans: list[PlanResponse]


class PlanEnvelope(BaseModel):
    message: str
    plan: PlanResponse
