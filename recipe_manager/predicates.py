"""Composable search predicates over :class:`~recipe_manager.models.Recipe`.

Each elementary criterion is a small frozen dataclass with a ``matches`` method.
:func:`build_predicate` combines whichever criteria were supplied into a single
:class:`And`, or returns :data:`NO_FILTER` when nothing was supplied. Stores may
inspect the clauses to push some of them down to a native query.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple, Union

from .models import Recipe


class _NoFilter:
    """Marker returned when a search carries no criteria at all."""

    _instance: Optional["_NoFilter"] = None

    def __new__(cls) -> "_NoFilter":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_FILTER"


NO_FILTER = _NoFilter()


def _ingredients_of(recipe: Recipe, field: str) -> List[str]:
    return getattr(recipe, field) or []


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any

    def matches(self, recipe: Recipe) -> bool:
        return getattr(recipe, self.field) == self.value


@dataclass(frozen=True)
class Contains:
    """The list attribute ``field`` holds ``value``."""

    field: str
    value: str

    def matches(self, recipe: Recipe) -> bool:
        return self.value in _ingredients_of(recipe, self.field)


@dataclass(frozen=True)
class NotContains:
    """The list attribute ``field`` does not hold ``value``."""

    field: str
    value: str

    def matches(self, recipe: Recipe) -> bool:
        return self.value not in _ingredients_of(recipe, self.field)


@dataclass(frozen=True)
class ContainsText:
    """Case-insensitive substring match; ``text`` is stored lowercased."""

    field: str
    text: str

    def matches(self, recipe: Recipe) -> bool:
        haystack = getattr(recipe, self.field) or ""
        return self.text in haystack.lower()


Clause = Union[Equals, Contains, NotContains, ContainsText]


@dataclass(frozen=True)
class And:
    clauses: Tuple[Clause, ...]

    def matches(self, recipe: Recipe) -> bool:
        return all(clause.matches(recipe) for clause in self.clauses)


Predicate = And
SearchFilter = Union[And, _NoFilter]


def build_predicate(
    *,
    vegetarian: Optional[bool] = None,
    servings: Optional[int] = None,
    include_ingredients: Optional[Iterable[str]] = None,
    exclude_ingredients: Optional[Iterable[str]] = None,
    text: Optional[str] = None,
    preparation_time: Optional[int] = None,
) -> SearchFilter:
    """Combine the supplied search criteria into one predicate.

    Absent criteria, empty ingredient lists and blank ``text`` contribute
    nothing. Ingredient values are compared verbatim, so callers are expected
    to normalize them first. Clauses are emitted in a fixed order: vegetarian,
    servings, included ingredients, excluded ingredients, text, preparation
    time. Returns :data:`NO_FILTER` when no clause was produced.
    """

    clauses: List[Clause] = []

    if vegetarian is not None:
        clauses.append(Equals("vegetarian", vegetarian))
    if servings is not None:
        clauses.append(Equals("servings", servings))
    for ingredient in include_ingredients or ():
        clauses.append(Contains("ingredients", ingredient))
    for ingredient in exclude_ingredients or ():
        clauses.append(NotContains("ingredients", ingredient))
    if text is not None and text.strip():
        clauses.append(ContainsText("instructions", text.strip().lower()))
    if preparation_time is not None:
        clauses.append(Equals("preparation_time", preparation_time))

    if not clauses:
        return NO_FILTER
    return And(tuple(clauses))


__all__ = [
    "NO_FILTER",
    "And",
    "Clause",
    "Contains",
    "ContainsText",
    "Equals",
    "NotContains",
    "Predicate",
    "SearchFilter",
    "build_predicate",
]
