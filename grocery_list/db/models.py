"""Dataclass models for the grocery list and recipe suggestions.

GroceryItem is the only persisted entity; Ingredient and Recipe live in
memory for the duration of a recipe session.  to_dict()/from_dict() use the
camelCase JSON keys shared by the stored list and the recipe endpoint.
"""

import uuid
from dataclasses import dataclass, field


def new_id() -> str:
    """Return a fresh upper-case UUID string."""
    return str(uuid.uuid4()).upper()


class RecipeDecodeError(ValueError):
    """Raised when a recipe payload doesn't match the expected shape."""


@dataclass
class GroceryItem:
    """A named entry on the grocery list."""
    name: str
    purchased: bool = False
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "purchased": self.purchased}

    @classmethod
    def from_dict(cls, data: dict) -> "GroceryItem":
        """Build an item from stored JSON. Raises ValueError on a bad shape."""
        if not isinstance(data, dict):
            raise ValueError(f"Expected an object, got {type(data).__name__}")
        name = data.get("name")
        if not isinstance(name, str):
            raise ValueError("Grocery item is missing a name")
        purchased = data.get("purchased", False)
        if not isinstance(purchased, bool):
            raise ValueError("Grocery item 'purchased' must be a boolean")
        item_id = data.get("id")
        return cls(
            name=name,
            purchased=purchased,
            id=str(item_id) if item_id else new_id(),
        )


@dataclass
class Ingredient:
    """A free-form ingredient tag used to bias recipe generation."""
    name: str
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


_RECIPE_TEXT_FIELDS = {
    "title": "title",
    "shortDescription": "short_description",
    "difficulty": "difficulty",
    "time": "time",
    "image": "image",
}
_RECIPE_LIST_FIELDS = ("ingredients", "steps")


@dataclass
class Recipe:
    """A server-generated recipe suggestion.

    image is either an http(s) URL or an inline encoded image.
    """

    title: str
    short_description: str
    ingredients: list = field(default_factory=list)  # list[str]
    steps: list = field(default_factory=list)  # list[str]
    difficulty: str = ""
    time: str = ""
    image: str = ""
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "shortDescription": self.short_description,
            "ingredients": list(self.ingredients),
            "steps": list(self.steps),
            "difficulty": self.difficulty,
            "time": self.time,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data) -> "Recipe":
        """Decode one recipe object. Every key except id is required."""
        if not isinstance(data, dict):
            raise RecipeDecodeError(f"Expected a recipe object, got {type(data).__name__}")

        kwargs = {}
        for key, attr in _RECIPE_TEXT_FIELDS.items():
            value = data.get(key)
            if not isinstance(value, str):
                raise RecipeDecodeError(f"Recipe field '{key}' missing or not a string")
            kwargs[attr] = value
        for key in _RECIPE_LIST_FIELDS:
            value = data.get(key)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise RecipeDecodeError(f"Recipe field '{key}' must be a list of strings")
            kwargs[key] = list(value)

        recipe_id = data.get("id")
        return cls(id=str(recipe_id) if recipe_id else new_id(), **kwargs)
