import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.policy import Capability, require_capability
from db.database import get_async_session
from db.users import User
from schemas.ingredient import Ingredient, IngredientCreate, IngredientPage
from services.catalog import IngredientCatalog
from services.exceptions import IngredientNotFound

logger = logging.getLogger(__name__)

router = APIRouter()


def get_catalog(db: AsyncSession = Depends(get_async_session)) -> IngredientCatalog:
    return IngredientCatalog(db)


@router.get("/", response_model=IngredientPage)
async def get_ingredients(
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    catalog: IngredientCatalog = Depends(get_catalog)
):
    """Get all ingredients, paginated"""
    items, total = await catalog.list(page, size)
    return IngredientPage(items=[i.to_schema for i in items], total=total, page=page, size=size)


@router.get("/search", response_model=IngredientPage)
async def search_ingredients(
    name: str = Query(..., description="Substring of the ingredient name, case-insensitive"),
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    catalog: IngredientCatalog = Depends(get_catalog)
):
    """Search ingredients by name"""
    items, total = await catalog.search(name, page, size)
    return IngredientPage(items=[i.to_schema for i in items], total=total, page=page, size=size)


@router.get("/{ingredient_id}", response_model=Ingredient)
async def get_ingredient(ingredient_id: int, catalog: IngredientCatalog = Depends(get_catalog)):
    """Get an ingredient by ID"""
    try:
        ingredient = await catalog.get(ingredient_id)
    except IngredientNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ingredient.to_schema


@router.post("/", response_model=Ingredient, status_code=status.HTTP_201_CREATED)
async def create_ingredient(
    ingredient: IngredientCreate,
    user: User = Depends(require_capability(Capability.CREATE_INGREDIENT)),
    catalog: IngredientCatalog = Depends(get_catalog)
):
    """Create an ingredient, or return the existing one with the same normalized name"""
    try:
        ingredient_model = await catalog.create(ingredient.name)
    except SQLAlchemyError:
        logger.exception("Error creating ingredient %r", ingredient.name)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )
    return ingredient_model.to_schema


@router.delete("/{ingredient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ingredient(
    ingredient_id: int,
    user: User = Depends(require_capability(Capability.DELETE_INGREDIENT)),
    catalog: IngredientCatalog = Depends(get_catalog)
):
    """Delete an ingredient; recipe steps using it are removed first"""
    try:
        deleted = await catalog.delete(ingredient_id)
    except SQLAlchemyError:
        logger.exception("Error deleting ingredient %s", ingredient_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Ingredient with id {ingredient_id} not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
