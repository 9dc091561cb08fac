import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.policy import Capability, require_capability
from db.database import get_async_session
from db.users import User
from schemas.cocktails import (
    CocktailRecipe,
    CocktailRecipeCreate,
    CocktailRecipePage,
    CocktailRecipeUpdate,
)
from services.cocktails import CocktailManager
from services.exceptions import CocktailNotFound, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


def get_cocktail_manager(db: AsyncSession = Depends(get_async_session)) -> CocktailManager:
    return CocktailManager(db)


@router.get("/", response_model=CocktailRecipePage)
async def get_cocktails(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    manager: CocktailManager = Depends(get_cocktail_manager)
):
    """Get all cocktail recipes, paginated"""
    items, total = await manager.list(page, size)
    return CocktailRecipePage(items=items, total=total, page=page, size=size)


@router.get("/search", response_model=CocktailRecipePage)
async def search_cocktails(
    name: str = Query(..., description="Substring of the cocktail name, case-insensitive"),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    manager: CocktailManager = Depends(get_cocktail_manager)
):
    """Search cocktail recipes by name"""
    items, total = await manager.search(name, page, size)
    return CocktailRecipePage(items=items, total=total, page=page, size=size)


@router.get("/{cocktail_id}", response_model=CocktailRecipe)
async def get_cocktail_recipe(cocktail_id: int, manager: CocktailManager = Depends(get_cocktail_manager)):
    """Get a single cocktail recipe by ID"""
    try:
        return await manager.get(cocktail_id)
    except CocktailNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/", response_model=CocktailRecipe, status_code=status.HTTP_201_CREATED)
async def create_cocktail_recipe(
    cocktail: CocktailRecipeCreate,
    user: User = Depends(require_capability(Capability.CREATE_COCKTAIL)),
    manager: CocktailManager = Depends(get_cocktail_manager)
):
    """Create a new cocktail recipe from a flat ingredient list"""
    try:
        return await manager.create(cocktail, cocktail.ingredients, cocktail.instruction)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error creating cocktail %r", cocktail.name)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )


@router.put("/{cocktail_id}", response_model=CocktailRecipe)
async def update_cocktail_recipe(
    cocktail_id: int,
    cocktail: CocktailRecipeUpdate,
    user: User = Depends(require_capability(Capability.EDIT_COCKTAIL)),
    manager: CocktailManager = Depends(get_cocktail_manager)
):
    """Partially update a cocktail recipe; ingredients are not editable"""
    try:
        return await manager.update(cocktail_id, cocktail)
    except CocktailNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error updating cocktail %s", cocktail_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )


@router.delete("/{cocktail_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cocktail_recipe(
    cocktail_id: int,
    user: User = Depends(require_capability(Capability.EDIT_COCKTAIL)),
    manager: CocktailManager = Depends(get_cocktail_manager)
):
    """Delete a cocktail recipe together with its steps and favorites"""
    try:
        deleted = await manager.delete(cocktail_id)
    except SQLAlchemyError:
        logger.exception("Error deleting cocktail %s", cocktail_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Cocktail with id {cocktail_id} not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
