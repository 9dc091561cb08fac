import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import CocktailRecipe as CocktailRecipeModel, Favorite as FavoriteModel
from schemas.cocktails import CocktailRecipe
from services.cocktails import CocktailManager
from services.exceptions import AlreadyFavorited, CocktailNotFound, FavoriteNotFound

logger = logging.getLogger(__name__)

# A unique violation on (user_id, cocktail_id) means a concurrent toggle won
# the race; the check-then-act is re-run this many extra times.
TOGGLE_RETRIES = 1


class FavoritesLedger:
    """Per-user set of bookmarked cocktails.

    ``user_id`` is whatever opaque identifier the auth layer hands over; it is
    only ever compared.
    """

    def __init__(self, session: AsyncSession, cocktails: Optional[CocktailManager] = None):
        self.session = session
        self.cocktails = cocktails or CocktailManager(session)

    async def _require_cocktail(self, cocktail_id: int) -> None:
        found = await self.session.scalar(
            select(CocktailRecipeModel.id).where(CocktailRecipeModel.id == cocktail_id)
        )
        if found is None:
            raise CocktailNotFound(cocktail_id)

    async def _find(self, user_id: str, cocktail_id: int) -> Optional[FavoriteModel]:
        result = await self.session.execute(
            select(FavoriteModel).where(
                FavoriteModel.user_id == user_id,
                FavoriteModel.cocktail_id == cocktail_id
            )
        )
        return result.scalar_one_or_none()

    async def add(self, user_id: str, cocktail_id: int) -> None:
        try:
            await self._require_cocktail(cocktail_id)
            if await self._find(user_id, cocktail_id):
                raise AlreadyFavorited(user_id, cocktail_id)

            self.session.add(FavoriteModel(user_id=user_id, cocktail_id=cocktail_id))
            await self.session.commit()
        except IntegrityError:
            # Inserted by a concurrent request between the check and the commit
            await self.session.rollback()
            raise AlreadyFavorited(user_id, cocktail_id)
        except Exception:
            await self.session.rollback()
            raise

    async def remove(self, user_id: str, cocktail_id: int) -> None:
        try:
            favorite = await self._find(user_id, cocktail_id)
            if not favorite:
                raise FavoriteNotFound(user_id, cocktail_id)

            await self.session.delete(favorite)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def toggle(self, user_id: str, cocktail_id: int) -> bool:
        """Flip the favorite; True when it now exists, False when it was removed."""
        attempt = 0
        while True:
            try:
                added = await self._toggle_once(user_id, cocktail_id)
                await self.session.commit()
                break
            except IntegrityError:
                await self.session.rollback()
                if attempt >= TOGGLE_RETRIES:
                    raise
                attempt += 1
                logger.warning("Toggle race on favorite (%s, %s), retrying", user_id, cocktail_id)
            except Exception:
                await self.session.rollback()
                raise

        logger.info("User %s %s cocktail %s", user_id, "favorited" if added else "unfavorited", cocktail_id)
        return added

    async def _toggle_once(self, user_id: str, cocktail_id: int) -> bool:
        await self._require_cocktail(cocktail_id)
        existing = await self._find(user_id, cocktail_id)
        if existing:
            await self.session.delete(existing)
            return False
        self.session.add(FavoriteModel(user_id=user_id, cocktail_id=cocktail_id))
        await self.session.flush()
        return True

    async def list(self, user_id: str) -> List[CocktailRecipe]:
        """Hydrated favorites, newest first. Favorites of vanished cocktails are skipped."""
        result = await self.session.execute(
            select(FavoriteModel.cocktail_id)
            .where(FavoriteModel.user_id == user_id)
            .order_by(FavoriteModel.created_at.desc(), FavoriteModel.id.desc())
        )
        cocktail_ids = list(result.scalars().all())
        if not cocktail_ids:
            return []

        found = await self.session.execute(
            select(CocktailRecipeModel).where(CocktailRecipeModel.id.in_(cocktail_ids))
        )
        by_id = {cocktail.id: cocktail for cocktail in found.scalars().all()}
        cocktails = [by_id[cid] for cid in cocktail_ids if cid in by_id]
        return await self.cocktails.hydrate_many(cocktails)

    async def count(self, user_id: str) -> int:
        total = await self.session.scalar(
            select(func.count()).select_from(FavoriteModel).where(FavoriteModel.user_id == user_id)
        )
        return total or 0

    async def exists(self, user_id: str, cocktail_id: int) -> bool:
        return await self._find(user_id, cocktail_id) is not None
