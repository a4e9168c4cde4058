"""Seed the plan catalog, an operator account and the destination catalog.

Idempotent: existing plans, users and destinations are left alone, except
that the operator account is promoted to ADMIN and its password reset.

Usage:
    python -m traveltrek.tasks.seed --admin-email admin@traveltrek.com --admin-password ...
"""

import argparse
import asyncio
import os

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from traveltrek.config import settings
from traveltrek.database import async_session_maker, init_db
from traveltrek.models import Destination, Difficulty, PlanConfig, User, UserRole
from traveltrek.services.plans import DEFAULT_PLANS
from traveltrek.services.security import hash_password

logger = structlog.get_logger()

DEFAULT_DESTINATIONS = [
    {
        "name": "Manali",
        "description": "A breathtaking hill station in Himachal Pradesh, perfect for adventure enthusiasts and nature lovers.",
        "duration_days": 3,
        "best_months": ["March", "April", "May", "June", "October", "November"],
        "difficulty": Difficulty.MODERATE,
        "image_url": "https://images.unsplash.com/photo-1626621341517-bbf3d9993a23?w=800",
    },
    {
        "name": "Goa",
        "description": "India's beach paradise with stunning coastlines, vibrant nightlife, and Portuguese heritage.",
        "duration_days": 4,
        "best_months": ["November", "December", "January", "February", "March"],
        "difficulty": Difficulty.EASY,
        "image_url": "https://images.unsplash.com/photo-1512343879784-a960bf40e7f2?w=800",
    },
    {
        "name": "Kerala Backwaters",
        "description": "Experience the serene backwaters of Kerala on a traditional houseboat cruise.",
        "duration_days": 3,
        "best_months": ["September", "October", "November", "December", "January", "February"],
        "difficulty": Difficulty.EASY,
        "image_url": "https://images.unsplash.com/photo-1602216056096-3b40cc0c9944?w=800",
    },
    {
        "name": "Jaipur",
        "description": "The Pink City with majestic forts, palaces, and rich Rajasthani culture.",
        "duration_days": 2,
        "best_months": ["October", "November", "December", "January", "February", "March"],
        "difficulty": Difficulty.EASY,
        "image_url": "https://images.unsplash.com/photo-1477587458883-47145ed94245?w=800",
    },
    {
        "name": "Ladakh",
        "description": "The land of high passes, stunning monasteries, and breathtaking Himalayan landscapes.",
        "duration_days": 6,
        "best_months": ["June", "July", "August", "September"],
        "difficulty": Difficulty.DIFFICULT,
        "image_url": "https://images.unsplash.com/photo-1545389336-cf090694435e?w=800",
    },
    {
        "name": "Udaipur",
        "description": "The City of Lakes with stunning palaces, romantic boat rides, and royal heritage.",
        "duration_days": 2,
        "best_months": ["September", "October", "November", "December", "January", "February", "March"],
        "difficulty": Difficulty.EASY,
        "image_url": "https://images.unsplash.com/photo-1524230507669-5ff97982bb5e?w=800",
    },
    {
        "name": "Rishikesh",
        "description": "The yoga capital of the world, offering spiritual retreats and adventure sports by the Ganges.",
        "duration_days": 2,
        "best_months": ["February", "March", "April", "May", "September", "October", "November"],
        "difficulty": Difficulty.MODERATE,
        "image_url": "https://images.unsplash.com/photo-1617516202459-f1d95d57ae57?w=800",
    },
    {
        "name": "Andaman Islands",
        "description": "Pristine beaches, crystal-clear waters, and incredible marine life await.",
        "duration_days": 5,
        "best_months": ["October", "November", "December", "January", "February", "March", "April", "May"],
        "difficulty": Difficulty.MODERATE,
        "image_url": "https://images.unsplash.com/photo-1507525428034-b723cf961d3e?w=800",
    },
]


async def seed_plans(db: AsyncSession) -> int:
    result = await db.execute(select(PlanConfig.plan_type))
    existing = set(result.scalars().all())

    created = 0
    for plan in DEFAULT_PLANS:
        if plan["plan_type"] in existing:
            logger.info("Plan already exists", plan_type=plan["plan_type"].value)
            continue
        db.add(PlanConfig(**plan, is_active=True))
        created += 1

    await db.commit()
    return created


async def seed_admin(db: AsyncSession, email: str, password: str) -> User:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    admin = result.scalar_one_or_none()

    if admin is None:
        admin = User(
            name="Super Admin",
            email=email.lower(),
            phone="0000000000",
            role=UserRole.ADMIN,
        )
        db.add(admin)

    admin.password_hash = hash_password(password)
    admin.password_set = True
    admin.role = UserRole.ADMIN
    await db.commit()
    return admin


async def seed_destinations(db: AsyncSession) -> int:
    result = await db.execute(select(Destination.name))
    existing = set(result.scalars().all())

    created = 0
    for destination in DEFAULT_DESTINATIONS:
        if destination["name"] in existing:
            continue
        db.add(Destination(**destination))
        created += 1

    await db.commit()
    return created


async def _seed_async(admin_email: str, admin_password: str) -> dict:
    await init_db()
    async with async_session_maker() as db:
        plans = await seed_plans(db)
        admin = await seed_admin(db, admin_email, admin_password)
        destinations = await seed_destinations(db)

    logger.info(
        "Seed completed",
        plans_created=plans,
        admin_email=admin.email,
        destinations_created=destinations,
    )
    return {"plans_created": plans, "destinations_created": destinations, "admin_email": admin.email}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed plans, an admin user and destinations")
    parser.add_argument("--admin-email", default=os.getenv("ADMIN_EMAIL", "admin@traveltrek.com"))
    parser.add_argument("--admin-password", default=os.getenv("ADMIN_PASSWORD"))
    args = parser.parse_args()

    password = args.admin_password
    if not password:
        if settings.is_production:
            parser.error("--admin-password (or ADMIN_PASSWORD) is required in production")
        password = "admin123"

    result = asyncio.run(_seed_async(args.admin_email, password))
    print(f"Seeded {result['plans_created']} plans and {result['destinations_created']} destinations")
    print(f"Admin user: {result['admin_email']}")
