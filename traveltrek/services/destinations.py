"""Destination catalog."""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.errors import NotFoundError
from traveltrek.models import Destination, DestinationStatus
from traveltrek.schemas.destination import DestinationCreate, DestinationUpdate

logger = structlog.get_logger()


async def list_destinations(
    db: AsyncSession, status: DestinationStatus | None = None
) -> list[Destination]:
    stmt = select(Destination).order_by(Destination.name)
    if status is not None:
        stmt = stmt.where(Destination.status == status)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_destination(db: AsyncSession, destination_id: str) -> Destination:
    destination = await db.get(Destination, destination_id)
    if destination is None:
        raise NotFoundError("Destination not found")
    return destination


async def create_destination(db: AsyncSession, data: DestinationCreate) -> Destination:
    destination = Destination(**data.model_dump())
    db.add(destination)
    await db.commit()
    logger.info("Destination created", destination_id=destination.id, name=destination.name)
    return destination


async def update_destination(
    db: AsyncSession, destination_id: str, patch: DestinationUpdate
) -> Destination:
    destination = await get_destination(db, destination_id)
    for field, value in patch.model_dump(exclude_unset=True).items():
        setattr(destination, field, value)
    await db.commit()
    logger.info("Destination updated", destination_id=destination_id, fields=sorted(patch.model_fields_set))
    return destination


async def delete_destination(db: AsyncSession, destination_id: str) -> None:
    destination = await get_destination(db, destination_id)
    await db.delete(destination)
    await db.commit()
    logger.info("Destination deleted", destination_id=destination_id)
