"""Recipe use cases: create, replace, patch, delete and search."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Mapping, Optional

from .errors import PatchApplicationError, RecipeNotFoundError
from .models import Recipe
from .normalize import normalize_ingredients
from .patch import apply_patch
from .predicates import NO_FILTER, SearchFilter
from .storage import RecipeRepository

logger = logging.getLogger(__name__)


class RecipeService:
    """Coordinates recipe mutations and lookups against a repository.

    Every call is a single read-modify-write against the store; no state is
    kept between calls.
    """

    def __init__(self, storage: RecipeRepository) -> None:
        self._storage = storage

    def create(self, recipe: Recipe) -> Recipe:
        new_recipe = replace(recipe, id=None, ingredients=normalize_ingredients(recipe.ingredients))
        saved = self._storage.save_recipe(new_recipe)
        logger.info("Created recipe %s (%r)", saved.id, saved.name)
        return saved

    def update(self, recipe_id: str, recipe: Recipe) -> Recipe:
        """Replace every mutable field of an existing recipe."""

        self._require(recipe_id)
        updated = replace(recipe, id=recipe_id, ingredients=normalize_ingredients(recipe.ingredients))
        saved = self._storage.save_recipe(updated)
        logger.info("Replaced recipe %s", recipe_id)
        return saved

    def partial_update(self, recipe_id: str, patch: Mapping[str, Any]) -> Recipe:
        """Apply a merge patch to an existing recipe."""

        existing = self._require(recipe_id)
        try:
            patched = apply_patch(existing, patch)
        except PatchApplicationError as exc:
            logger.warning("Rejected patch for recipe %s: %s", recipe_id, exc)
            raise
        saved = self._storage.save_recipe(patched)
        logger.info("Patched recipe %s fields=%s", recipe_id, sorted(key for key in patch if key != "id"))
        return saved

    def delete(self, recipe_id: str) -> None:
        if not self._storage.recipe_exists(recipe_id):
            logger.warning("Cannot delete missing recipe %s", recipe_id)
            raise RecipeNotFoundError(recipe_id)
        self._storage.delete_recipe(recipe_id)
        logger.info("Deleted recipe %s", recipe_id)

    def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        logger.debug("Looking up recipe %s", recipe_id)
        return self._storage.get_recipe(recipe_id)

    def find_all(self, predicate: SearchFilter = NO_FILTER) -> List[Recipe]:
        if predicate is NO_FILTER:
            return list(self._storage.list_recipes())
        logger.debug("Searching recipes with %r", predicate)
        return list(self._storage.filter_recipes(predicate))

    def _require(self, recipe_id: str) -> Recipe:
        existing = self._storage.get_recipe(recipe_id)
        if existing is None:
            logger.warning("Recipe %s does not exist", recipe_id)
            raise RecipeNotFoundError(recipe_id)
        return existing


__all__ = ["RecipeService"]
