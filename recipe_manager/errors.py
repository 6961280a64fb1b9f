from __future__ import annotations


class RecipeError(Exception):
    """Base class for errors raised by the recipe service."""


class RecipeNotFoundError(RecipeError):
    """Raised when a mutation targets a recipe id that does not exist."""

    def __init__(self, recipe_id: str) -> None:
        super().__init__(f"Recipe not found with id: {recipe_id}")
        self.recipe_id = recipe_id


class PatchApplicationError(RecipeError):
    """Raised when a partial update names an unknown field or carries a bad value."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"Cannot apply patch to '{field}': {message}")
        self.field = field


class ValidationError(RecipeError):
    """Raised by the HTTP layer for malformed request bodies or query parameters."""


__all__ = ["RecipeError", "RecipeNotFoundError", "PatchApplicationError", "ValidationError"]
