import logging
from collections import defaultdict
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import (
    CocktailRecipe as CocktailRecipeModel,
    Favorite as FavoriteModel,
    Ingredient as IngredientModel,
    RecipeStep as RecipeStepModel,
)
from schemas.cocktails import (
    CocktailFields,
    CocktailRecipe,
    CocktailRecipeUpdate,
    RecipeIngredientInput,
    RecipeStepRead,
)
from services.assembler import RecipeAssembler
from services.catalog import IngredientCatalog
from services.exceptions import CocktailNotFound, EmptyName

logger = logging.getLogger(__name__)

UNKNOWN_INGREDIENT = "unknown ingredient"
UPDATABLE_FIELDS = ("name", "description", "preparation_time_minutes", "notes")


class CocktailManager:
    """Creation, partial update and cascading deletion of cocktail aggregates.

    A cocktail aggregate is the cocktail row plus its ordered recipe steps.
    ``create`` and ``delete`` each commit once or roll back completely, so no
    cocktail is ever left without its steps (or steps without a cocktail).
    """

    def __init__(self, session: AsyncSession, assembler: Optional[RecipeAssembler] = None):
        self.session = session
        self.assembler = assembler or RecipeAssembler(IngredientCatalog(session))

    async def create(
        self,
        fields: CocktailFields,
        entries: Sequence[RecipeIngredientInput],
        instruction: Optional[str] = None,
    ) -> CocktailRecipe:
        try:
            cocktail, steps = await self.assembler.assemble(fields, entries, instruction)

            self.session.add(cocktail)
            await self.session.flush()  # Flush to get the ID

            for step in steps:
                step.cocktail_id = cocktail.id
            self.session.add_all(steps)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Created cocktail %r (id=%s) with %d steps", cocktail.name, cocktail.id, len(steps))
        return await self.hydrate(cocktail)

    async def update(self, cocktail_id: int, changes: CocktailRecipeUpdate) -> CocktailRecipe:
        """Apply a partial update; recipe steps are never touched.

        Fields left out of the request, or sent as null, keep their value.
        A text field sent as an empty string is cleared, except ``name``
        which cannot be emptied.
        """
        try:
            cocktail = await self.session.get(CocktailRecipeModel, cocktail_id)
            if not cocktail:
                raise CocktailNotFound(cocktail_id)

            for field in UPDATABLE_FIELDS:
                if field not in changes.model_fields_set:
                    continue
                value = getattr(changes, field)
                if value is None:
                    continue
                if field == "name":
                    value = value.strip()
                    if not value:
                        raise EmptyName()
                elif isinstance(value, str) and not value.strip():
                    value = None
                setattr(cocktail, field, value)

            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        return await self.hydrate(cocktail)

    async def delete(self, cocktail_id: int) -> bool:
        """Delete a cocktail with its favorites and steps.

        Favorites and steps go first, the cocktail row always last. The row
        count of that final delete decides the result, so of two concurrent
        deletes of the same id at most one returns True.
        """
        try:
            exists = await self.session.scalar(
                select(CocktailRecipeModel.id).where(CocktailRecipeModel.id == cocktail_id)
            )
            if exists is None:
                return False

            favorites = await self.session.execute(
                delete(FavoriteModel).where(FavoriteModel.cocktail_id == cocktail_id)
            )
            steps = await self.session.execute(
                delete(RecipeStepModel).where(RecipeStepModel.cocktail_id == cocktail_id)
            )
            removed = await self.session.execute(
                delete(CocktailRecipeModel).where(CocktailRecipeModel.id == cocktail_id)
            )
            if removed.rowcount == 0:
                await self.session.rollback()
                return False

            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Deleted cocktail %s with %s step(s) and %s favorite(s)",
            cocktail_id, steps.rowcount, favorites.rowcount
        )
        return True

    async def get(self, cocktail_id: int) -> CocktailRecipe:
        cocktail = await self.session.get(CocktailRecipeModel, cocktail_id)
        if not cocktail:
            raise CocktailNotFound(cocktail_id)
        return await self.hydrate(cocktail)

    async def list(self, page: int = 0, size: int = 20) -> Tuple[List[CocktailRecipe], int]:
        return await self._page(select(CocktailRecipeModel), page, size)

    async def search(self, name: str, page: int = 0, size: int = 20) -> Tuple[List[CocktailRecipe], int]:
        """Case-insensitive substring match on the cocktail name."""
        query = select(CocktailRecipeModel).where(
            func.lower(CocktailRecipeModel.name).contains((name or "").strip().lower(), autoescape=True)
        )
        return await self._page(query, page, size)

    async def _page(self, query, page: int, size: int) -> Tuple[List[CocktailRecipe], int]:
        total = await self.session.scalar(
            select(func.count()).select_from(query.subquery())
        )
        result = await self.session.execute(
            query.order_by(CocktailRecipeModel.id).offset(page * size).limit(size)
        )
        cocktails = result.scalars().all()
        return await self.hydrate_many(cocktails), total or 0

    async def hydrate(self, cocktail: CocktailRecipeModel) -> CocktailRecipe:
        views = await self.hydrate_many([cocktail])
        return views[0]

    async def hydrate_many(self, cocktails: Sequence[CocktailRecipeModel]) -> List[CocktailRecipe]:
        """Build read views with ordered steps and ingredient display names.

        Two queries regardless of how many cocktails or steps: one for the
        steps, one for the names of the distinct ingredients they reference.
        """
        if not cocktails:
            return []

        result = await self.session.execute(
            select(RecipeStepModel)
            .where(RecipeStepModel.cocktail_id.in_([c.id for c in cocktails]))
            .order_by(RecipeStepModel.cocktail_id, RecipeStepModel.step_order)
            .execution_options(populate_existing=True)
        )
        steps_by_cocktail = defaultdict(list)
        for step in result.scalars().all():
            steps_by_cocktail[step.cocktail_id].append(step)

        ingredient_ids = {
            step.ingredient_id
            for steps in steps_by_cocktail.values()
            for step in steps
        }
        names = {}
        if ingredient_ids:
            rows = await self.session.execute(
                select(IngredientModel.id, IngredientModel.name)
                .where(IngredientModel.id.in_(ingredient_ids))
            )
            names = {row.id: row.name for row in rows}

        return [
            CocktailRecipe(
                id=cocktail.id,
                name=cocktail.name,
                description=cocktail.description,
                preparation_time_minutes=cocktail.preparation_time_minutes,
                notes=cocktail.notes,
                created_at=cocktail.created_at,
                steps=[
                    RecipeStepRead(
                        step_order=step.step_order,
                        ingredient=names.get(step.ingredient_id, UNKNOWN_INGREDIENT),
                        quantity=step.quantity,
                        unit=step.unit,
                        instruction=step.instruction,
                    )
                    for step in steps_by_cocktail[cocktail.id]
                ],
            )
            for cocktail in cocktails
        ]
