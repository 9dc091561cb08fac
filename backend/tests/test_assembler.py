from decimal import Decimal

import pytest

from db.models import Ingredient
from schemas.cocktails import CocktailFields, RecipeIngredientInput
from services.assembler import DEFAULT_INSTRUCTION, RecipeAssembler
from services.catalog import IngredientCatalog
from services.exceptions import DuplicateIngredient, EmptyName, InsufficientIngredients, InvalidQuantity


@pytest.fixture
def assembler(session):
    return RecipeAssembler(IngredientCatalog(session))


def entries(*names):
    return [RecipeIngredientInput(name=name, quantity=1, unit="oz") for name in names]


async def test_empty_name_is_checked_first(assembler):
    with pytest.raises(EmptyName):
        await assembler.assemble(CocktailFields(name="   "), entries("gin"))


async def test_needs_at_least_two_ingredients(assembler, count_rows):
    with pytest.raises(InsufficientIngredients) as exc_info:
        await assembler.assemble(CocktailFields(name="Gin neat"), entries("gin"))

    assert exc_info.value.given == 1
    assert await count_rows(Ingredient) == 0


async def test_empty_ingredient_list(assembler):
    with pytest.raises(InsufficientIngredients):
        await assembler.assemble(CocktailFields(name="Nothing"), [])


async def test_duplicate_after_normalization_rejected_before_resolving(assembler, count_rows):
    with pytest.raises(DuplicateIngredient) as exc_info:
        await assembler.assemble(CocktailFields(name="Double gin"), entries("Gin", "tonic", "gin"))

    assert exc_info.value.name == "gin"
    assert await count_rows(Ingredient) == 0


async def test_existing_catalog_ingredient_is_not_a_duplicate(session, assembler):
    await IngredientCatalog(session).create("gin")

    cocktail, steps = await assembler.assemble(CocktailFields(name="Gin Tonic"), entries("Gin", "Tonic"))

    assert cocktail.name == "Gin Tonic"
    assert len(steps) == 2


async def test_steps_follow_input_order(assembler):
    cocktail, steps = await assembler.assemble(
        CocktailFields(name="  Old Fashioned ", notes="Stir"),
        [
            RecipeIngredientInput(name="Sugar", quantity=None, unit="cube"),
            RecipeIngredientInput(name="Angostura", quantity=Decimal("2"), unit="dash"),
            RecipeIngredientInput(name="Bourbon", quantity=Decimal("2.50"), unit="oz"),
        ],
    )

    assert cocktail.name == "Old Fashioned"
    assert cocktail.notes == "Stir"
    assert cocktail.id is None
    assert [s.step_order for s in steps] == [1, 2, 3]
    assert [s.quantity for s in steps] == [None, Decimal("2"), Decimal("2.50")]
    assert [s.unit for s in steps] == ["cube", "dash", "oz"]
    assert all(s.cocktail_id is None for s in steps)


async def test_instruction_defaults_to_placeholder(assembler):
    _, steps = await assembler.assemble(CocktailFields(name="Highball"), entries("whisky", "soda"), "   ")

    assert {s.instruction for s in steps} == {DEFAULT_INSTRUCTION}


async def test_instruction_is_trimmed_and_shared(assembler):
    _, steps = await assembler.assemble(
        CocktailFields(name="Daiquiri"), entries("rum", "lime", "syrup"), "  Shake hard  "
    )

    assert {s.instruction for s in steps} == {"Shake hard"}


@pytest.mark.parametrize("quantity", [Decimal("0.125"), Decimal("-1"), Decimal("1000000")])
async def test_quantity_must_fit_stored_precision(assembler, count_rows, quantity):
    # model_construct skips the request schema, as a direct service caller would
    bad = RecipeIngredientInput.model_construct(name="gin", quantity=quantity, unit="oz")

    with pytest.raises(InvalidQuantity) as exc_info:
        await assembler.assemble(CocktailFields(name="Odd"), [bad] + entries("tonic"))

    assert exc_info.value.name == "gin"
    assert await count_rows(Ingredient) == 0


async def test_trailing_zeros_fit_stored_precision(assembler):
    _, steps = await assembler.assemble(
        CocktailFields(name="Gimlet"),
        [
            RecipeIngredientInput.model_construct(name="gin", quantity=Decimal("2.000"), unit="oz"),
            RecipeIngredientInput(name="lime cordial", quantity=1, unit="oz"),
        ],
    )

    assert steps[0].quantity == Decimal("2")
