import asyncio
import logging
import os
import sys
from pathlib import Path

"""
Seed a superuser and a handful of classic cocktails into the database.

Cocktails that already exist (same name, case-insensitive) are skipped, so the
script can be re-run safely.

This script can be run from either:
- backend/: `python scripts/seed_demo_cocktails.py`
- repo root: `python backend/scripts/seed_demo_cocktails.py`
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from fastapi_users.password import PasswordHelper
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import async_session_maker, create_db_and_tables
from db.models import CocktailRecipe, User
from schemas.cocktails import CocktailRecipeCreate
from services.cocktails import CocktailManager

logger = logging.getLogger(__name__)

password_helper = PasswordHelper()

DEMO_COCKTAILS = [
    {
        "name": "Margarita",
        "description": "Tequila sour with orange liqueur.",
        "preparation_time_minutes": 5,
        "notes": "Salt half the rim.",
        "instruction": "Shake with ice and strain",
        "ingredients": [
            {"name": "tequila", "quantity": "2", "unit": "oz"},
            {"name": "lime juice", "quantity": "1", "unit": "oz"},
            {"name": "triple sec", "quantity": "0.5", "unit": "oz"},
        ],
    },
    {
        "name": "Negroni",
        "description": "Gin, Campari, and sweet vermouth.",
        "preparation_time_minutes": 3,
        "instruction": "Stir with ice, garnish with orange peel",
        "ingredients": [
            {"name": "gin", "quantity": "1", "unit": "oz"},
            {"name": "campari", "quantity": "1", "unit": "oz"},
            {"name": "sweet vermouth", "quantity": "1", "unit": "oz"},
        ],
    },
    {
        "name": "Mojito",
        "description": "Rum, lime, mint, sugar, topped with soda.",
        "preparation_time_minutes": 6,
        "ingredients": [
            {"name": "white rum", "quantity": "2", "unit": "oz"},
            {"name": "lime juice", "quantity": "1", "unit": "oz"},
            {"name": "simple syrup", "quantity": "0.75", "unit": "oz"},
            {"name": "mint", "quantity": "8", "unit": "leaves"},
            {"name": "soda water", "quantity": "2", "unit": "oz"},
        ],
    },
    {
        "name": "Daiquiri",
        "description": "Rum, lime, and sugar.",
        "preparation_time_minutes": 4,
        "instruction": "Shake hard and double strain",
        "ingredients": [
            {"name": "white rum", "quantity": "2", "unit": "oz"},
            {"name": "lime juice", "quantity": "1", "unit": "oz"},
            {"name": "simple syrup", "quantity": "0.75", "unit": "oz"},
        ],
    },
]


async def get_or_create_admin(session: AsyncSession, email: str, password: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        return user

    user = User(
        email=email,
        hashed_password=password_helper.hash(password),
        is_active=True,
        is_superuser=True,
        is_verified=True,
    )
    session.add(user)
    await session.commit()
    return user


async def seed_cocktails(session: AsyncSession) -> int:
    """Create the demo cocktails that are missing; returns how many were created."""
    manager = CocktailManager(session)
    created = 0
    for data in DEMO_COCKTAILS:
        request = CocktailRecipeCreate(**data)
        existing = await session.scalar(
            select(CocktailRecipe.id).where(func.lower(CocktailRecipe.name) == request.name.lower())
        )
        if existing is not None:
            logger.info("Skipping %s, already present", request.name)
            continue
        await manager.create(request, request.ingredients, request.instruction)
        created += 1
    return created


async def seed():
    await create_db_and_tables()
    async with async_session_maker() as session:
        await get_or_create_admin(
            session,
            os.getenv("SEED_ADMIN_EMAIL", "admin@example.com"),
            os.getenv("SEED_ADMIN_PASSWORD", "admin"),
        )
        created = await seed_cocktails(session)
    logger.info("Seeded %d cocktail(s)", created)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
