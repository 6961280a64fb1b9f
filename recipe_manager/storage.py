from __future__ import annotations

import copy
import logging
import threading
import uuid
from typing import Dict, Iterable, List, Optional, Protocol

from .models import Recipe
from .predicates import Predicate

logger = logging.getLogger(__name__)


class RecipeRepository(Protocol):
    """Protocol describing the persistence behaviour required by the service."""

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        """Return a single recipe or ``None`` if it does not exist."""

    def recipe_exists(self, recipe_id: str) -> bool:
        """Return whether a recipe with ``recipe_id`` is stored."""

    def save_recipe(self, recipe: Recipe) -> Recipe:
        """Insert or replace a recipe, assigning an id when it has none."""

    def delete_recipe(self, recipe_id: str) -> None:
        """Remove a stored recipe."""

    def list_recipes(self) -> Iterable[Recipe]:
        """Return every stored recipe."""

    def filter_recipes(self, predicate: Predicate) -> Iterable[Recipe]:
        """Return the stored recipes matching ``predicate``."""


class InMemoryRecipeStorage(RecipeRepository):
    """Process-local storage backend, used for local development and tests.

    Recipes are copied on the way in and out so callers never share state with
    the store. Listing follows insertion order.
    """

    def __init__(self) -> None:
        self._recipes: Dict[str, Recipe] = {}
        self._lock = threading.Lock()

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        with self._lock:
            recipe = self._recipes.get(recipe_id)
            return copy.deepcopy(recipe) if recipe is not None else None

    def recipe_exists(self, recipe_id: str) -> bool:
        with self._lock:
            return recipe_id in self._recipes

    def save_recipe(self, recipe: Recipe) -> Recipe:
        stored = copy.deepcopy(recipe)
        if stored.id is None:
            stored.id = uuid.uuid4().hex
        with self._lock:
            self._recipes[stored.id] = stored
        logger.debug("Stored recipe %s in memory", stored.id)
        return copy.deepcopy(stored)

    def delete_recipe(self, recipe_id: str) -> None:
        with self._lock:
            self._recipes.pop(recipe_id, None)

    def list_recipes(self) -> List[Recipe]:
        with self._lock:
            return [copy.deepcopy(recipe) for recipe in self._recipes.values()]

    def filter_recipes(self, predicate: Predicate) -> List[Recipe]:
        return [recipe for recipe in self.list_recipes() if predicate.matches(recipe)]


__all__ = ["RecipeRepository", "InMemoryRecipeStorage"]
