import logging
from typing import List, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import Ingredient, RecipeStep
from services.exceptions import IngredientNotFound

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Trim and lowercase an ingredient name before storage or comparison."""
    return (name or "").strip().lower()


class IngredientCatalog:
    """The shared set of distinct ingredient names."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_name(self, name: str) -> Ingredient | None:
        result = await self.session.execute(
            select(Ingredient).where(func.lower(Ingredient.name) == normalize_name(name))
        )
        return result.scalar_one_or_none()

    async def resolve(self, name: str) -> Ingredient:
        """Get or create the ingredient called ``name``.

        Runs inside the caller's transaction and does not commit. The insert
        is wrapped in a SAVEPOINT so that losing a race against another
        request inserting the same name only undoes this insert, after which
        the winner's row is returned.
        """
        normalized = normalize_name(name)
        ingredient = await self.find_by_name(normalized)
        if ingredient:
            return ingredient

        ingredient = Ingredient(name=normalized)
        try:
            async with self.session.begin_nested():
                self.session.add(ingredient)
        except IntegrityError:
            logger.warning("Ingredient %r was created concurrently, reusing it", normalized)
            ingredient = await self.find_by_name(normalized)
            if ingredient is None:
                raise
            return ingredient

        logger.info("Created ingredient %r (id=%s)", normalized, ingredient.id)
        return ingredient

    async def create(self, name: str) -> Ingredient:
        """Standalone get-or-create, committed."""
        try:
            ingredient = await self.resolve(name)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return ingredient

    async def get(self, ingredient_id: int) -> Ingredient:
        ingredient = await self.session.get(Ingredient, ingredient_id)
        if not ingredient:
            raise IngredientNotFound(ingredient_id)
        return ingredient

    async def list(self, page: int = 0, size: int = 20) -> Tuple[List[Ingredient], int]:
        return await self._page(select(Ingredient), page, size)

    async def search(self, text: str, page: int = 0, size: int = 20) -> Tuple[List[Ingredient], int]:
        query = select(Ingredient).where(
            func.lower(Ingredient.name).contains(normalize_name(text), autoescape=True)
        )
        return await self._page(query, page, size)

    async def _page(self, query, page: int, size: int) -> Tuple[List[Ingredient], int]:
        total = await self.session.scalar(
            select(func.count()).select_from(query.subquery())
        )
        result = await self.session.execute(
            query.order_by(Ingredient.name).offset(page * size).limit(size)
        )
        return list(result.scalars().all()), total or 0

    async def delete(self, ingredient_id: int) -> bool:
        """Delete an ingredient after detaching every recipe step that uses it.

        The owning cocktails are left as they are, even when this drops them
        below the ingredient minimum enforced at creation.
        """
        try:
            ingredient = await self.session.get(Ingredient, ingredient_id)
            if not ingredient:
                return False

            detached = await self.session.execute(
                delete(RecipeStep).where(RecipeStep.ingredient_id == ingredient_id)
            )
            await self.session.delete(ingredient)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Deleted ingredient %s and %s recipe step(s)", ingredient_id, detached.rowcount)
        return True
