import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.policy import Capability, actor_id, current_user_id, require_capability
from db.database import get_async_session
from db.users import User
from schemas.cocktails import CocktailRecipe
from schemas.favorites import FavoriteCount, FavoriteStatus
from services.exceptions import AlreadyFavorited, NotFoundError
from services.favorites import FavoritesLedger

logger = logging.getLogger(__name__)

router = APIRouter()


def get_ledger(db: AsyncSession = Depends(get_async_session)) -> FavoritesLedger:
    return FavoritesLedger(db)


def _internal_error(action: str, cocktail_id: int) -> HTTPException:
    logger.exception("Error trying to %s favorite for cocktail %s", action, cocktail_id)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )


@router.get("/", response_model=List[CocktailRecipe])
async def get_favorites(
    user_id: str = Depends(current_user_id),
    ledger: FavoritesLedger = Depends(get_ledger)
):
    """Get the authenticated user's favorite cocktails"""
    return await ledger.list(user_id)


@router.get("/count", response_model=FavoriteCount)
async def count_favorites(
    user_id: str = Depends(current_user_id),
    ledger: FavoritesLedger = Depends(get_ledger)
):
    return FavoriteCount(count=await ledger.count(user_id))


@router.get("/check/{cocktail_id}", response_model=FavoriteStatus)
async def check_favorite(
    cocktail_id: int,
    user_id: str = Depends(current_user_id),
    ledger: FavoritesLedger = Depends(get_ledger)
):
    return FavoriteStatus(cocktail_id=cocktail_id, is_favorite=await ledger.exists(user_id, cocktail_id))


@router.post("/toggle/{cocktail_id}", response_model=FavoriteStatus)
async def toggle_favorite(
    cocktail_id: int,
    user: User = Depends(require_capability(Capability.MANAGE_FAVORITES)),
    ledger: FavoritesLedger = Depends(get_ledger)
):
    """Add the cocktail to the favorites if missing, otherwise remove it"""
    try:
        added = await ledger.toggle(actor_id(user), cocktail_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError:
        raise _internal_error("toggle", cocktail_id)
    return FavoriteStatus(cocktail_id=cocktail_id, is_favorite=added)


@router.post("/{cocktail_id}", response_model=FavoriteStatus, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    cocktail_id: int,
    user: User = Depends(require_capability(Capability.MANAGE_FAVORITES)),
    ledger: FavoritesLedger = Depends(get_ledger)
):
    """Add a cocktail to the authenticated user's favorites"""
    try:
        await ledger.add(actor_id(user), cocktail_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AlreadyFavorited as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except SQLAlchemyError:
        raise _internal_error("add", cocktail_id)
    return FavoriteStatus(cocktail_id=cocktail_id, is_favorite=True)


@router.delete("/{cocktail_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    cocktail_id: int,
    user: User = Depends(require_capability(Capability.MANAGE_FAVORITES)),
    ledger: FavoritesLedger = Depends(get_ledger)
):
    """Remove a cocktail from the authenticated user's favorites"""
    try:
        await ledger.remove(actor_id(user), cocktail_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SQLAlchemyError:
        raise _internal_error("remove", cocktail_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
