"""Pytest fixtures: an in-memory SQLite store per test and an API client on top of it."""

import os
import uuid

# Must be set before anything imports core.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from fastapi import HTTPException, status
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401
from core.auth import current_active_user
from db.database import Base, build_engine, get_async_session
from db.users import User
from schemas.cocktails import CocktailRecipeCreate, RecipeIngredientInput
from main import app


@pytest.fixture
async def engine():
    """Fresh in-memory database with every table created."""
    test_engine = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def session(engine):
    maker = async_sessionmaker(engine, expire_on_commit=False)
    async with maker() as db_session:
        yield db_session


@pytest.fixture
def count_rows(session):
    """Return the number of rows of a mapped model."""

    async def _count(model) -> int:
        return await session.scalar(select(func.count()).select_from(model))

    return _count


def make_cocktail(name, *ingredients, instruction=None, **fields) -> CocktailRecipeCreate:
    """Build a creation request from (name, quantity, unit) tuples."""
    return CocktailRecipeCreate(
        name=name,
        ingredients=[
            RecipeIngredientInput(name=ing_name, quantity=quantity, unit=unit)
            for ing_name, quantity, unit in ingredients
        ],
        instruction=instruction,
        **fields,
    )


@pytest.fixture
def margarita() -> CocktailRecipeCreate:
    return make_cocktail(
        "Margarita",
        ("tequila", 2, "oz"),
        ("lime juice", 1, "oz"),
        ("triple sec", "0.5", "oz"),
        instruction="Shake with ice",
        description="Classic sour",
        preparation_time_minutes=5,
        notes="Salt the rim",
    )


def make_user(email: str, is_superuser: bool = False, is_active: bool = True) -> User:
    return User(
        id=uuid.uuid4(),
        email=email,
        hashed_password="not-a-real-hash",
        is_active=is_active,
        is_superuser=is_superuser,
        is_verified=True,
    )


@pytest.fixture
def member() -> User:
    return make_user("member@example.com")


@pytest.fixture
def admin() -> User:
    return make_user("admin@example.com", is_superuser=True)


@pytest.fixture
def inactive_admin() -> User:
    return make_user("former-admin@example.com", is_superuser=True, is_active=False)


class AuthState:
    """Who the API client is logged in as; None means anonymous."""

    user = None


@pytest.fixture
def auth() -> AuthState:
    return AuthState()


@pytest.fixture
async def client(session, auth):
    async def override_session():
        yield session

    def override_user():
        if auth.user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        return auth.user

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[current_active_user] = override_user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as api_client:
        yield api_client
    app.dependency_overrides.clear()


@pytest.fixture
def new_cocktail():
    return make_cocktail
