from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from db.models import CocktailRecipe, RecipeStep
from schemas.cocktails import CocktailFields, RecipeIngredientInput
from services.catalog import IngredientCatalog, normalize_name
from services.exceptions import DuplicateIngredient, EmptyName, InsufficientIngredients, InvalidQuantity

MIN_INGREDIENTS = 2
# Matches RecipeStep.quantity, Numeric(8, 2)
QUANTITY_STEP = Decimal("0.01")
QUANTITY_LIMIT = Decimal("1000000")
DEFAULT_INSTRUCTION = "Mix the ingredients"


def check_quantity(entry: RecipeIngredientInput) -> None:
    if entry.quantity is None:
        return
    quantity = Decimal(str(entry.quantity))
    if quantity < 0 or quantity >= QUANTITY_LIMIT or quantity != quantity.quantize(QUANTITY_STEP):
        raise InvalidQuantity(entry.name, entry.quantity)


class RecipeAssembler:
    """Turns base fields plus a flat ingredient list into a cocktail and its ordered steps.

    Validation runs in a fixed order (name, ingredient count, then duplicates
    and quantities per entry) and finishes before any ingredient is resolved,
    so a rejected request leaves the catalog untouched. Steps are numbered
    by input position; nothing is sorted or merged.
    """

    def __init__(self, catalog: IngredientCatalog):
        self.catalog = catalog

    async def assemble(
        self,
        fields: CocktailFields,
        entries: Sequence[RecipeIngredientInput],
        instruction: Optional[str] = None,
    ) -> Tuple[CocktailRecipe, List[RecipeStep]]:
        name = (fields.name or "").strip()
        if not name:
            raise EmptyName()

        entries = list(entries or [])
        if len(entries) < MIN_INGREDIENTS:
            raise InsufficientIngredients(MIN_INGREDIENTS, len(entries))

        seen = set()
        for entry in entries:
            normalized = normalize_name(entry.name)
            if normalized in seen:
                raise DuplicateIngredient(entry.name)
            seen.add(normalized)
            check_quantity(entry)

        step_instruction = (instruction or "").strip() or DEFAULT_INSTRUCTION

        cocktail = CocktailRecipe(
            name=name,
            description=fields.description,
            preparation_time_minutes=fields.preparation_time_minutes,
            notes=fields.notes,
        )

        steps = []
        for step_order, entry in enumerate(entries, start=1):
            ingredient = await self.catalog.resolve(entry.name)
            steps.append(
                RecipeStep(
                    ingredient_id=ingredient.id,
                    quantity=entry.quantity,
                    unit=entry.unit,
                    step_order=step_order,
                    instruction=step_instruction,
                )
            )

        return cocktail, steps
