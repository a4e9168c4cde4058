"""Plan catalog: the source of truth for plan economics."""

from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.errors import NotFoundError, ValidationError
from traveltrek.models import Destination, PlanConfig, PlanType
from traveltrek.schemas.plan import PlanUpdate

logger = structlog.get_logger()

# Seeded lazily when the catalog is empty
DEFAULT_PLANS = [
    {
        "plan_type": PlanType.ONE_YEAR,
        "name": "1-Year Membership",
        "description": "6 travel days over one year",
        "days": 6,
        "price": Decimal("9999"),
    },
    {
        "plan_type": PlanType.THREE_YEAR,
        "name": "3-Year Membership",
        "description": "18 travel days over three years",
        "days": 18,
        "price": Decimal("24999"),
    },
    {
        "plan_type": PlanType.FIVE_YEAR,
        "name": "5-Year Membership",
        "description": "30 travel days over five years",
        "days": 30,
        "price": Decimal("39999"),
    },
]


async def _query_plans(db: AsyncSession, active_only: bool) -> list[PlanConfig]:
    stmt = select(PlanConfig).order_by(PlanConfig.plan_type)
    if active_only:
        stmt = stmt.where(PlanConfig.is_active.is_(True))
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def seed_default_plans(db: AsyncSession) -> list[PlanConfig]:
    plans = [PlanConfig(**plan, is_active=True, destinations=[]) for plan in DEFAULT_PLANS]
    db.add_all(plans)
    await db.commit()
    logger.info("Seeded default plan catalog", plans=[p.plan_type.value for p in plans])
    return plans


async def list_plans(db: AsyncSession, active_only: bool = True) -> list[PlanConfig]:
    """
    Plans ordered by plan type.

    An empty catalog heals itself by seeding the default tiers.
    """
    plans = await _query_plans(db, active_only)
    if plans:
        return plans

    # Only seed when the table is truly empty, not when every tier is retired
    if active_only and await _query_plans(db, active_only=False):
        return []

    await seed_default_plans(db)
    return await _query_plans(db, active_only)


async def get_active_plan(db: AsyncSession, plan_type: PlanType | str) -> PlanConfig:
    """Active plan for `plan_type`, or ValidationError."""
    try:
        plan_type = PlanType(plan_type)
    except ValueError:
        raise ValidationError("Invalid plan selected", plan_type=str(plan_type))

    result = await db.execute(
        select(PlanConfig).where(
            PlanConfig.plan_type == plan_type,
            PlanConfig.is_active.is_(True),
        )
    )
    plan = result.scalar_one_or_none()
    if plan is None:
        # The catalog may never have been read yet
        if not await _query_plans(db, active_only=False):
            await seed_default_plans(db)
            return await get_active_plan(db, plan_type)
        raise ValidationError("Invalid plan selected", plan_type=plan_type.value)
    return plan


async def load_destinations(db: AsyncSession, destination_ids: list[str]) -> list[Destination]:
    """Destinations for `destination_ids`, all of which must exist."""
    if not destination_ids:
        return []
    unique_ids = list(dict.fromkeys(destination_ids))
    result = await db.execute(select(Destination).where(Destination.id.in_(unique_ids)))
    destinations = list(result.scalars().all())

    missing = set(unique_ids) - {d.id for d in destinations}
    if missing:
        raise NotFoundError("Destination not found", destination_ids=sorted(missing))
    return destinations


async def update_plan(db: AsyncSession, plan_id: str, patch: PlanUpdate) -> PlanConfig:
    """Replace only the fields present in `patch`."""
    plan = await db.get(PlanConfig, plan_id)
    if plan is None:
        raise NotFoundError("Plan not found")

    changes = patch.model_dump(exclude_unset=True)
    destination_ids = changes.pop("destination_ids", None)

    for field, value in changes.items():
        setattr(plan, field, value)
    if "destination_ids" in patch.model_fields_set:
        plan.destinations = await load_destinations(db, destination_ids or [])

    await db.commit()
    await db.refresh(plan, attribute_names=["destinations"])
    logger.info("Plan updated", plan_id=plan.id, fields=sorted(patch.model_fields_set))
    return plan
