from __future__ import annotations

from typing import Iterable, List, Optional


def normalize_ingredients(values: Optional[Iterable[Optional[str]]]) -> Optional[List[str]]:
    """Strip and lowercase every ingredient, dropping blank entries.

    ``None`` passes through unchanged so callers can tell "no ingredient list"
    apart from an empty one. Order and repeats are preserved.
    """

    if values is None:
        return None
    return [value.strip().lower() for value in values if value is not None and value.strip()]


__all__ = ["normalize_ingredients"]
