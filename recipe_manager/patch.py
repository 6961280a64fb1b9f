"""Merge-patch support for partial recipe updates.

A patch is a sparse JSON object naming only the fields to change. Keys are
matched against the closed set of :class:`PatchField` members; anything else is
rejected with :class:`PatchApplicationError` so that client typos surface
instead of being silently dropped. ``id`` is always discarded.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .errors import PatchApplicationError
from .models import Recipe
from .normalize import normalize_ingredients

IDENTITY_KEY = "id"


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class PatchField(Enum):
    """Recipe fields that may be replaced by a patch, keyed by their JSON name."""

    NAME = ("name", "name")
    VEGETARIAN = ("vegetarian", "vegetarian")
    SERVINGS = ("servings", "servings")
    INGREDIENTS = ("ingredients", "ingredients")
    INSTRUCTIONS = ("instructions", "instructions")
    PREPARATION_TIME = ("preparationTime", "preparation_time")

    def __init__(self, json_key: str, attribute: str) -> None:
        self.json_key = json_key
        self.attribute = attribute

    @classmethod
    def from_key(cls, key: str) -> "PatchField":
        for field in cls:
            if field.json_key == key:
                return field
        raise PatchApplicationError(key, "unknown field")

    def coerce(self, value: Any) -> Any:
        """Return ``value`` checked against this field's type."""

        if self in (PatchField.NAME, PatchField.INSTRUCTIONS):
            return self._coerce_string(value)
        if self is PatchField.VEGETARIAN:
            return self._coerce_boolean(value)
        if self in (PatchField.SERVINGS, PatchField.PREPARATION_TIME):
            return self._coerce_count(value)
        if self is PatchField.INGREDIENTS:
            return self._coerce_ingredients(value)
        raise AssertionError(f"unhandled patch field {self!r}")  # pragma: no cover

    def _fail(self, expected: str, value: Any) -> PatchApplicationError:
        return PatchApplicationError(self.json_key, f"expected {expected}, got {_json_type(value)}")

    def _coerce_string(self, value: Any) -> str:
        if not isinstance(value, str):
            raise self._fail("a string", value)
        return value

    def _coerce_boolean(self, value: Any) -> bool:
        if not isinstance(value, bool):
            raise self._fail("a boolean", value)
        return value

    def _coerce_count(self, value: Any) -> int:
        # bool is a subclass of int; true/false are not counts.
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._fail("an integer", value)
        if value < 0:
            raise PatchApplicationError(self.json_key, "must not be negative")
        return value

    def _coerce_ingredients(self, value: Any) -> Optional[List[str]]:
        if value is None:
            return None
        if not isinstance(value, list):
            raise self._fail("an array of strings", value)
        for item in value:
            if not isinstance(item, str):
                raise self._fail("an array of strings", item)
        return list(value)


def parse_patch(patch: Mapping[str, Any]) -> Dict[PatchField, Any]:
    """Validate ``patch`` and return the coerced value for every named field."""

    updates: Dict[PatchField, Any] = {}
    for key, value in patch.items():
        if key == IDENTITY_KEY:
            continue
        field = PatchField.from_key(key)
        updates[field] = field.coerce(value)
    return updates


def apply_patch(recipe: Recipe, patch: Mapping[str, Any]) -> Recipe:
    """Return a copy of ``recipe`` with the fields named in ``patch`` replaced.

    Fields missing from the patch keep their current value. The ingredient list
    is normalized afterwards whenever it is present, whether or not the patch
    touched it. The input recipe is not modified.
    """

    updates = parse_patch(patch)
    patched = replace(recipe, **{field.attribute: value for field, value in updates.items()})
    if patched.ingredients is not None:
        patched.ingredients = normalize_ingredients(patched.ingredients)
    return patched


__all__ = ["PatchField", "apply_patch", "parse_patch"]
