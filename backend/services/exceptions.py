"""Service layer exceptions for the cocktail catalog.

Exception Hierarchy:
    ServiceError
    ├── ValidationError        (caller-correctable, HTTP 400)
    │   ├── EmptyName
    │   ├── InsufficientIngredients
    │   ├── DuplicateIngredient
    │   └── InvalidQuantity
    ├── NotFoundError          (HTTP 404)
    │   ├── CocktailNotFound
    │   ├── IngredientNotFound
    │   └── FavoriteNotFound
    └── ConflictError          (HTTP 409)
        └── AlreadyFavorited

Anything else escaping a service (SQLAlchemyError and friends) is an
infrastructure failure: the service has already rolled back.
"""


class ServiceError(Exception):
    """Base exception for all service layer errors."""

    pass


class ValidationError(ServiceError):
    """Base for request data the caller can fix."""

    pass


class EmptyName(ValidationError):
    """Raised when a cocktail name is empty after trimming."""

    def __init__(self):
        super().__init__("Cocktail name must not be empty")


class InsufficientIngredients(ValidationError):
    """Raised when a cocktail is created with fewer than the minimum ingredients."""

    def __init__(self, minimum: int, given: int):
        self.minimum = minimum
        self.given = given
        super().__init__(f"A cocktail needs at least {minimum} ingredients, got {given}")


class DuplicateIngredient(ValidationError):
    """Raised when the same ingredient appears twice in one recipe."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Duplicate ingredient: {name}")


class InvalidQuantity(ValidationError):
    """Raised when a quantity is negative or does not fit the stored precision."""

    def __init__(self, name: str, quantity):
        self.name = name
        self.quantity = quantity
        super().__init__(f"Invalid quantity for {name}: {quantity}")


class NotFoundError(ServiceError):
    """Base for missing read, update, delete or toggle targets."""

    pass


class CocktailNotFound(NotFoundError):
    def __init__(self, cocktail_id: int):
        self.cocktail_id = cocktail_id
        super().__init__(f"Cocktail with id {cocktail_id} not found")


class IngredientNotFound(NotFoundError):
    def __init__(self, ingredient_id: int):
        self.ingredient_id = ingredient_id
        super().__init__(f"Ingredient with id {ingredient_id} not found")


class FavoriteNotFound(NotFoundError):
    def __init__(self, user_id: str, cocktail_id: int):
        self.user_id = user_id
        self.cocktail_id = cocktail_id
        super().__init__(f"Cocktail {cocktail_id} is not in the favorites")


class ConflictError(ServiceError):
    pass


class AlreadyFavorited(ConflictError):
    def __init__(self, user_id: str, cocktail_id: int):
        self.user_id = user_id
        self.cocktail_id = cocktail_id
        super().__init__(f"Cocktail {cocktail_id} is already in the favorites")
