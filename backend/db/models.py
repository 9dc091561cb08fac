"""Every mapped table, importable from one place."""
from .cocktail_recipe import CocktailRecipe
from .ingredient import Ingredient
from .recipe_step import RecipeStep
from .favorite import Favorite
from .users import User

__all__ = ["CocktailRecipe", "Ingredient", "RecipeStep", "Favorite", "User"]
