#!/usr/bin/env python3
"""
Database maintenance commands.

    python -m scripts.db migrate          create every table (idempotent)
    python -m scripts.db prune [--force]  drop every table in the current schema
    python -m scripts.db seed             upsert demo categories, accounts, agents and listings
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import inspect, select, text, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.config import settings
from app.database import engine, create_tables
from app.models.user import User, UserRole
from app.models.agent import Agent
from app.models.category import Category
from app.models.property import Property, AreaUnit
from app.models.image import PropertyImage
from app.utils.filters import Purpose

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Statements toggling foreign key enforcement, per dialect
FK_CHECKS = {
    "sqlite": ("PRAGMA foreign_keys=OFF", "PRAGMA foreign_keys=ON"),
    "mysql": ("SET FOREIGN_KEY_CHECKS = 0", "SET FOREIGN_KEY_CHECKS = 1"),
    "postgresql": ("SET session_replication_role = 'replica'", "SET session_replication_role = 'origin'"),
}

UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

ADMIN_EMAIL = "admin@faithstate.com"
ADMIN_PASSWORD = "admin123"
AGENT_PASSWORD = "agent123"

SEED_CATEGORIES = [
    {"name": "Residential", "slug": "residential", "description": "Family homes, condos, and apartments", "icon": "home", "color": "blue"},
    {"name": "Commercial", "slug": "commercial", "description": "Office spaces and retail locations", "icon": "building", "color": "coral"},
    {"name": "Land & Plots", "slug": "land-plots", "description": "Vacant land and development plots", "icon": "tree", "color": "green"},
    {"name": "Industrial", "slug": "industrial", "description": "Warehouses and manufacturing spaces", "icon": "factory", "color": "orange"},
]

SEED_AGENTS = [
    {
        "name": "Sarah Johnson",
        "email": "sarah.johnson@faithstate.com",
        "title": "Senior Real Estate Agent",
        "specialty": "Luxury Homes",
        "specialization": "Residential",
        "experience": 8,
        "rating": 4.9,
        "reviews": 127,
        "sales": "$12M+",
        "languages": "English, Somali",
        "city": "Garowe",
        "image": "https://images.unsplash.com/photo-1494790108377-be9c29b29330?w=200&h=200&fit=crop&crop=face",
    },
    {
        "name": "Michael Chen",
        "email": "michael.chen@faithstate.com",
        "title": "Commercial Property Expert",
        "specialty": "Commercial Real Estate",
        "specialization": "Commercial",
        "experience": 12,
        "rating": 4.8,
        "reviews": 89,
        "sales": "$25M+",
        "languages": "English, Mandarin",
        "city": "Mogadishu",
        "image": "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=200&h=200&fit=crop&crop=face",
    },
    {
        "name": "Emily Rodriguez",
        "email": "emily.rodriguez@faithstate.com",
        "title": "First-Time Buyer Specialist",
        "specialty": "Residential Properties",
        "specialization": "Residential",
        "experience": 6,
        "rating": 4.9,
        "reviews": 156,
        "sales": "$8M+",
        "languages": "English, Spanish, Somali",
        "city": "Hargeisa",
        "image": "https://images.unsplash.com/photo-1438761681033-6461ffad8d80?w=200&h=200&fit=crop&crop=face",
    },
]

SEED_PROPERTIES = [
    {
        "title": "Modern Luxury Villa",
        "slug": "modern-luxury-villa",
        "type": "Villa",
        "description": "Stunning modern villa with pool and panoramic views",
        "price": 450000,
        "location": "Garowe",
        "city": "Garowe",
        "region": "Puntland",
        "beds": 4,
        "baths": 3,
        "area": 3200,
        "is_featured": True,
        "image": "https://images.unsplash.com/photo-1613490493576-7fde63acd811?w=600&h=400&fit=crop",
    },
    {
        "title": "Contemporary Apartment",
        "slug": "contemporary-apartment",
        "type": "Apartment",
        "description": "Sleek urban apartment in prime location",
        "price": 280000,
        "location": "Garowe",
        "city": "Garowe",
        "region": "Puntland",
        "beds": 3,
        "baths": 2,
        "area": 2100,
        "is_featured": True,
        "image": "https://images.unsplash.com/photo-1600596542815-ffad4c1539a9?w=600&h=400&fit=crop",
    },
    {
        "title": "Seaside Paradise",
        "slug": "seaside-paradise",
        "type": "Villa",
        "description": "Beachfront property with direct ocean access",
        "price": 520000,
        "location": "Garowe",
        "city": "Garowe",
        "region": "Puntland",
        "beds": 5,
        "baths": 4,
        "area": 4500,
        "is_featured": True,
        "image": "https://images.unsplash.com/photo-1512917774080-9991f1c4c750?w=600&h=400&fit=crop",
    },
    {
        "title": "Urban Loft",
        "slug": "urban-loft",
        "type": "Apartment",
        "description": "Industrial-style loft in the heart of the city",
        "price": 195000,
        "location": "Mogadishu",
        "city": "Mogadishu",
        "region": "Banaadir",
        "beds": 2,
        "baths": 2,
        "area": 1800,
        "is_featured": False,
        "image": "https://images.unsplash.com/photo-1502672260266-1c1ef2d93688?w=600&h=400&fit=crop",
    },
    {
        "title": "Family Estate",
        "slug": "family-estate",
        "type": "House",
        "description": "Spacious family home with large garden",
        "price": 350000,
        "location": "Hargeisa",
        "city": "Hargeisa",
        "region": "Somaliland",
        "beds": 6,
        "baths": 4,
        "area": 5200,
        "is_featured": False,
        "image": "https://images.unsplash.com/photo-1600585154340-be6161a56a0c?w=600&h=400&fit=crop",
    },
    {
        "title": "Coastal Retreat",
        "slug": "coastal-retreat",
        "type": "House",
        "description": "Tranquil coastal property perfect for relaxation",
        "price": 480000,
        "location": "Bosaso",
        "city": "Bosaso",
        "region": "Puntland",
        "beds": 4,
        "baths": 3,
        "area": 3800,
        "is_featured": False,
        "image": "https://images.unsplash.com/photo-1564013799919-ab600027ffc6?w=600&h=400&fit=crop",
    },
]


def upsert(dialect_name: str, model, rows: List[Dict[str, Any]], key: str):
    """
    Build an INSERT ... ON CONFLICT (key) DO UPDATE statement for the dialect.

    Every column given in the rows except ``key`` is overwritten on conflict.

    Raises:
        ValueError: If the dialect has no upsert construct here
    """
    try:
        insert = UPSERT_DIALECTS[dialect_name]
    except KeyError:
        raise ValueError(f"Seeding is not supported on {dialect_name}")

    stmt = insert(model).values(rows)
    updates = {column: stmt.excluded[column] for column in rows[0] if column != key}
    updates["updated_at"] = func.now()
    return stmt.on_conflict_do_update(index_elements=[key], set_=updates)


async def migrate(target_engine: Optional[AsyncEngine] = None) -> None:
    """Create every table that doesn't exist yet."""
    await create_tables(target_engine or engine)
    logger.info("Migration completed")


async def prune(target_engine: Optional[AsyncEngine] = None, force: bool = False) -> List[str]:
    """
    Drop every table in the current schema.

    Foreign key checks are disabled for the duration and re-enabled even when
    a drop fails. Tables already dropped stay dropped.

    Args:
        target_engine: Engine to prune, defaults to the application engine
        force: Required in production

    Returns:
        Names of the dropped tables

    Raises:
        RuntimeError: If run in production without ``force``
    """
    if settings.is_production and not force:
        raise RuntimeError("Refusing to prune a production database without --force")

    target_engine = target_engine or engine
    dropped = []

    async with target_engine.connect() as conn:
        conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
        dialect_name = conn.dialect.name
        disable, enable = FK_CHECKS.get(dialect_name, (None, None))
        preparer = conn.dialect.identifier_preparer

        logger.warning("Starting destructive drop operation")
        if disable:
            await conn.execute(text(disable))
        try:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            if not tables:
                logger.info("No tables found in the database")
            for table in tables:
                cascade = " CASCADE" if dialect_name == "postgresql" else ""
                await conn.execute(text(f"DROP TABLE IF EXISTS {preparer.quote(table)}{cascade}"))
                dropped.append(table)
                logger.info(f"Dropped table {table}")
            logger.info(f"{len(dropped)} tables removed")
        finally:
            if enable:
                try:
                    await conn.execute(text(enable))
                except Exception as e:
                    logger.error(f"Failed to re-enable foreign key checks: {e}")

    return dropped


async def _ids_by(session: AsyncSession, column, values: Sequence[Any]) -> Dict[Any, int]:
    result = await session.execute(select(column, column.class_.id).where(column.in_(values)))
    return {value: row_id for value, row_id in result.all()}


async def seed(session_factory: Optional[async_sessionmaker] = None) -> Dict[str, int]:
    """
    Upsert demo data: categories, the admin, three agents with accounts and six listings.

    Running it again updates the same rows instead of duplicating them.

    Returns:
        Number of rows upserted per table
    """
    if session_factory is None:
        from app.database import AsyncSessionLocal
        session_factory = AsyncSessionLocal

    async with session_factory() as session:
        dialect_name = session.bind.dialect.name
        try:
            await session.execute(upsert(dialect_name, Category, [
                {**category, "is_active": True} for category in SEED_CATEGORIES
            ], "slug"))

            users = [{
                "name": "Admin",
                "email": ADMIN_EMAIL,
                "hashed_password": User.hash_password(ADMIN_PASSWORD),
                "role": UserRole.ADMIN,
                "is_active": True,
            }]
            agent_password = User.hash_password(AGENT_PASSWORD)
            for agent in SEED_AGENTS:
                users.append({
                    "name": agent["name"],
                    "email": agent["email"],
                    "hashed_password": agent_password,
                    "role": UserRole.AGENT,
                    "is_active": True,
                })
            await session.execute(upsert(dialect_name, User, users, "email"))

            user_ids = await _ids_by(session, User.email, [agent["email"] for agent in SEED_AGENTS])
            agents = [
                {**{k: v for k, v in agent.items() if k != "email"}, "user_id": user_ids[agent["email"]]}
                for agent in SEED_AGENTS
            ]
            await session.execute(upsert(dialect_name, Agent, agents, "user_id"))

            agent_ids = await _ids_by(session, Agent.user_id, list(user_ids.values()))
            ordered_agent_ids = [agent_ids[user_ids[agent["email"]]] for agent in SEED_AGENTS]
            category_ids = await _ids_by(session, Category.slug, ["residential"])

            properties = []
            for index, listing in enumerate(SEED_PROPERTIES):
                row = {k: v for k, v in listing.items() if k != "image"}
                row.update({
                    "purpose": Purpose.SALE,
                    "currency": "USD",
                    "area_unit": AreaUnit.SQFT,
                    "amenities": [],
                    "is_published": True,
                    "agent_id": ordered_agent_ids[index % len(ordered_agent_ids)],
                    "category_id": category_ids["residential"],
                })
                properties.append(row)
            await session.execute(upsert(dialect_name, Property, properties, "slug"))

            property_ids = await _ids_by(session, Property.slug, [p["slug"] for p in SEED_PROPERTIES])
            with_images = set((await session.execute(
                select(PropertyImage.property_id).where(PropertyImage.property_id.in_(property_ids.values()))
            )).scalars().all())
            for listing in SEED_PROPERTIES:
                property_id = property_ids[listing["slug"]]
                if property_id not in with_images:
                    session.add(PropertyImage(property_id=property_id, url=listing["image"], sort_order=0))

            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Seeding failed: {e}")
            raise

    counts = {
        "categories": len(SEED_CATEGORIES),
        "users": len(SEED_AGENTS) + 1,
        "agents": len(SEED_AGENTS),
        "properties": len(SEED_PROPERTIES),
    }
    logger.info(f"Database seeded: {counts}")
    logger.info(f"Admin login: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
    logger.warning("Please change the seeded passwords outside development!")
    return counts


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command line entry point."""
    parser = argparse.ArgumentParser(description="Database maintenance")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("migrate", help="Create all tables")

    prune_parser = subparsers.add_parser("prune", help="Drop every table")
    prune_parser.add_argument("--force", action="store_true", help="Allow pruning in production")

    subparsers.add_parser("seed", help="Upsert demo data")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "migrate":
            asyncio.run(migrate())
        elif args.command == "prune":
            asyncio.run(prune(force=args.force))
        elif args.command == "seed":
            asyncio.run(seed())
    except Exception as e:
        logger.error(f"Command failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
