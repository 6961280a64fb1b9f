from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .models import Recipe
from .predicates import Equals, Predicate
from .storage import RecipeRepository

logger = logging.getLogger(__name__)

# Values _doc_to_recipe assumes when a document lacks the field (or holds null).
READ_DEFAULTS: Dict[str, Any] = {"vegetarian": False, "servings": 0, "preparation_time": 0}


def _recipe_to_doc(recipe: Recipe) -> Dict[str, Any]:
    return {
        "name": recipe.name,
        "vegetarian": recipe.vegetarian,
        "servings": recipe.servings,
        "ingredients": recipe.ingredients,
        "instructions": recipe.instructions,
        "preparation_time": recipe.preparation_time,
    }


class FirestoreRecipeStorage(RecipeRepository):
    """GCP backed recipe storage, one Firestore document per recipe."""

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        collection_name: str = "recipes",
        client: Optional[firestore.Client] = None,
    ) -> None:
        self._project = project
        self._collection_name = collection_name

        self._firestore_client = client if client is not None else firestore.Client(project=project)
        self._collection = self._firestore_client.collection(collection_name)

    @classmethod
    def from_env(cls) -> "FirestoreRecipeStorage":
        """Build a storage instance from environment variables."""

        project = os.environ.get("GCP_PROJECT")
        collection_name = os.environ.get("RECIPES_COLLECTION", "recipes")
        return cls(project=project, collection_name=collection_name)

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        snapshot = self._collection.document(recipe_id).get()

        if not snapshot.exists:
            return None

        data = snapshot.to_dict() or {}
        return self._doc_to_recipe(snapshot.id, data)

    def recipe_exists(self, recipe_id: str) -> bool:
        return self._collection.document(recipe_id).get().exists

    def save_recipe(self, recipe: Recipe) -> Recipe:
        if recipe.id is None:
            doc_ref = self._collection.document()
        else:
            doc_ref = self._collection.document(recipe.id)

        doc_ref.set(_recipe_to_doc(recipe))
        logger.debug("Wrote recipe document %s/%s", self._collection_name, doc_ref.id)

        snapshot = doc_ref.get()
        data = snapshot.to_dict() or {}
        return self._doc_to_recipe(snapshot.id, data)

    def delete_recipe(self, recipe_id: str) -> None:
        self._collection.document(recipe_id).delete()

    def list_recipes(self) -> Iterable[Recipe]:
        for doc in self._collection.stream():
            yield self._doc_to_recipe(doc.id, doc.to_dict() or {})

    def filter_recipes(self, predicate: Predicate) -> List[Recipe]:
        """Query with the equality clauses, then check the rest locally.

        Firestore cannot express substring or negated array membership, and
        mixing ``array_contains`` with equality filters needs a composite index,
        so only ``==`` filters are sent to the server. A filter on a field's read
        default is kept local, since Firestore skips documents lacking the field.
        Every streamed document is still checked against the full predicate.
        """

        query = self._collection
        pushed_down = 0
        for clause in predicate.clauses:
            if isinstance(clause, Equals) and clause.value != READ_DEFAULTS.get(clause.field):
                query = query.where(filter=FieldFilter(clause.field, "==", clause.value))
                pushed_down += 1

        logger.debug(
            "Filtering %s with %d server-side and %d local clauses",
            self._collection_name,
            pushed_down,
            len(predicate.clauses) - pushed_down,
        )

        recipes = []
        for doc in query.stream():
            recipe = self._doc_to_recipe(doc.id, doc.to_dict() or {})
            if predicate.matches(recipe):
                recipes.append(recipe)
        return recipes

    def _doc_to_recipe(self, doc_id: str, data: dict) -> Recipe:
        ingredients = data.get("ingredients")
        if isinstance(ingredients, list):
            parsed_ingredients: Optional[List[str]] = [str(item) for item in ingredients]
        else:
            parsed_ingredients = None

        return Recipe(
            id=doc_id,
            name=data.get("name") or "",
            vegetarian=bool(data.get("vegetarian") or False),
            servings=int(data.get("servings") or 0),
            ingredients=parsed_ingredients,
            instructions=data.get("instructions") or "",
            preparation_time=int(data.get("preparation_time") or 0),
        )


__all__ = ["FirestoreRecipeStorage"]
