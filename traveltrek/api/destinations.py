"""Public destination catalog endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.database import get_db
from traveltrek.models import DestinationStatus
from traveltrek.schemas.destination import (
    DestinationEnvelope,
    DestinationListResponse,
    DestinationResponse,
)
from traveltrek.services import destinations as destination_catalog

router = APIRouter(prefix="/destinations")


@router.get("", response_model=DestinationListResponse)
async def list_destinations(
    status: DestinationStatus | None = None,
    db: AsyncSession = Depends(get_db),
) -> DestinationListResponse:
    destinations = await destination_catalog.list_destinations(db, status=status)
    return DestinationListResponse(
        destinations=[DestinationResponse.model_validate(d) for d in destinations]
    )


@router.get("/{destination_id}", response_model=DestinationEnvelope)
async def get_destination(
    destination_id: str,
    db: AsyncSession = Depends(get_db),
) -> DestinationEnvelope:
    destination = await destination_catalog.get_destination(db, destination_id)
    return DestinationEnvelope(destination=DestinationResponse.model_validate(destination))
