"""Destination Pydantic schemas."""

import calendar

from pydantic import BaseModel, Field, field_validator

from traveltrek.models.enums import Difficulty, DestinationStatus
from traveltrek.schemas.common import reject_null

MONTH_NAMES = [name for name in calendar.month_name if name]


def _check_months(months: list[str] | None) -> list[str] | None:
    if months is None:
        return None
    unknown = [m for m in months if m not in MONTH_NAMES]
    if unknown:
        raise ValueError(f"Unknown month names: {', '.join(unknown)}")
    return months


class DestinationResponse(BaseModel):
    """Destination as shown in the catalog."""

    id: str
    name: str
    description: str
    duration_days: int
    best_months: list[str]
    difficulty: Difficulty
    status: DestinationStatus
    image_url: str | None = None

    model_config = {"from_attributes": True}


class DestinationCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = ""
    duration_days: int = Field(ge=1)
    best_months: list[str] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.EASY
    status: DestinationStatus = DestinationStatus.AVAILABLE
    image_url: str | None = None

    @field_validator("best_months")
    @classmethod
    def check_months(cls, value: list[str] | None) -> list[str] | None:
        return _check_months(value)


class DestinationUpdate(BaseModel):
    """Partial update. Only fields present in the request body change."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    duration_days: int | None = Field(default=None, ge=1)
    best_months: list[str] | None = None
    difficulty: Difficulty | None = None
    status: DestinationStatus | None = None
    image_url: str | None = None

    @field_validator(
        "name", "description", "duration_days", "best_months", "difficulty", "status"
    )
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

    @field_validator("best_months")
    @classmethod
    def check_months(cls, value: list[str] | None) -> list[str] | None:
        return _check_months(value)


class DestinationListResponse(BaseModel):
    destinations: list[DestinationResponse]


class DestinationEnvelope(BaseModel):
    message: str | None = None
    destination: DestinationResponse
