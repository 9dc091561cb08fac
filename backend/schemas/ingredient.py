from pydantic import BaseModel, Field, field_validator
from typing import List


class Ingredient(BaseModel):
    id: int
    name: str


class IngredientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("ingredient name is required")
        return v


class IngredientPage(BaseModel):
    items: List[Ingredient]
    total: int
    page: int
    size: int
