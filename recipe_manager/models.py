from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    id: Optional[str] = None
    name: str = ""
    vegetarian: bool = False
    servings: int = 0
    ingredients: Optional[List[str]] = None
    instructions: str = ""
    preparation_time: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation used by the HTTP API."""

        return {
            "id": self.id,
            "name": self.name,
            "vegetarian": self.vegetarian,
            "servings": self.servings,
            "ingredients": list(self.ingredients) if self.ingredients is not None else None,
            "instructions": self.instructions,
            "preparationTime": self.preparation_time,
        }


__all__ = ["Recipe"]
