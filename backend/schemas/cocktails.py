from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


# One line of the flat ingredient list sent when creating a cocktail
class RecipeIngredientInput(BaseModel):
    name: str = Field(max_length=150)
    quantity: Optional[Decimal] = Field(None, ge=0, max_digits=8, decimal_places=2)
    unit: Optional[str] = Field(None, max_length=30)

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("ingredient name is required")
        return v


class CocktailFields(BaseModel):
    name: str = Field(max_length=150)
    description: Optional[str] = None
    preparation_time_minutes: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class CocktailRecipeCreate(CocktailFields):
    ingredients: List[RecipeIngredientInput]
    instruction: Optional[str] = None  # Shared by every step


class CocktailRecipeUpdate(BaseModel):
    """Partial update: omitted or null fields are skipped, "" clears a text field"""
    name: Optional[str] = Field(None, max_length=150)
    description: Optional[str] = None
    preparation_time_minutes: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class RecipeStepRead(BaseModel):
    step_order: int
    ingredient: str
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    instruction: Optional[str] = None


class CocktailRecipe(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    preparation_time_minutes: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    steps: List[RecipeStepRead]


class CocktailRecipePage(BaseModel):
    items: List[CocktailRecipe]
    total: int
    page: int
    size: int
