"""Recipe suggestions session — ingredient tags, prompt, and fetched recipes.

A RecipeSession holds everything the recipe screen keeps in memory.  Nothing
here is persisted; reset() returns the session to its initial state.

refresh() fires two fetches at once.  The first clears the list when its
result lands, the second appends.  They are not ordered or locked against
each other, so whichever completes last decides the final order.
"""

import asyncio
import logging
from typing import Iterable, Optional

from grocery_list.core import recipe_client
from grocery_list.db.models import Ingredient, Recipe

logger = logging.getLogger(__name__)

# Image of the built-in sample recipe
SAMPLE_IMAGE_URL = (
    "https://api.together.ai/imgproxy/vNTK87K2QglAfUz-yX9Mt0BHdR7FVgzwIlPd-u3FwHQ/format:jpeg/aHR0cHM"
    "6Ly90b2dldGhlci1haS1iZmwtaW1hZ2VzLXByb2QuczMudXMtd2VzdC0yLmFtYXpvbmF3cy5jb20vaW1hZ2VzL2VlYmUyNjd"
    "lYWYwMDIzN2JjYzgzOWZiMzI1MjExNjNjMzljMWI0ZTFiMTBmNTA1MmQ4ODk4OWY0Y2RjNTA3YjQ_WC1BbXotQWxnb3JpdGh"
    "tPUFXUzQtSE1BQy1TSEEyNTYmWC1BbXotQ29udGVudC1TaGEyNTY9VU5TSUdORUQtUEFZTE9BRCZYLUFtei1DcmVkZW50aWF"
    "sPUFTSUFZV1pXNEhWQ04yRTc3RjVQJTJGMjAyNTA0MTUlMkZ1cy13ZXN0LTIlMkZzMyUyRmF3czRfcmVxdWVzdCZYLUFtei1"
    "EYXRlPTIwMjUwNDE1VDIxNDUwOVomWC1BbXotRXhwaXJlcz0zNjAwJlgtQW16LVNlY3VyaXR5LVRva2VuPUlRb0piM0pwWjJ"
    "sdVgyVmpFSzclMkYlMkYlMkYlMkYlMkYlMkYlMkYlMkYlMkYlMkZ3RWFDWFZ6TFhkbGMzUXRNaUpITUVVQ0lIOE5Zang1YVN"
    "FamZlYTV4Y1RVYlkyNnZlZlNQWWw1ZzlsV0NsUkQxaUNYQWlFQXJvZSUyRll6a2JnSyUyQkhvZ1ViQWNkMlNrUTRZbkRlbkh"
    "PV2JKRjBObnROVHpzcWtBVUlOeEFBR2d3MU9UZzNNall4TmpNM09EQWlEQzYwNW5BdkM0bnUlMkZTZ09TeXJ0QklNSTVwYkN"
    "mQSUyQm11QWx6dVNUa0ZYaVJsT3R0MkIwcURTbCUyRldhYTZ4TDhSZVVMOVV5JTJGbVFVRFB0NSUyQm5zMFlBM0FuMGwlMkJ"
    "2NTVielpuYyUyQkhHd3duRHg1Y1o0c2lxZ2phVFZES1hpRWVwWEx2Z29UaFhuTGpzTGI5YVI1a3ZsbGYxVTFLRTlITndvMjF"
    "wTVNzRGJJdXR3cnF4UXFsUzZFa3M5WVlWaVJVV2pqMWJoamJyRUxtSXdUWGk4dmhPR09OTzNOUUN3WnMwRjNmY3NyUWZzUHd"
    "oWDZjcVdkMjd0MFVJVjNXMFMlMkZVVnBpelFWJTJCZFppQ2tTRmxtYTlTWXhrNVFUbzQzUjJNZGZQcU1YMURUNFdDQzBxQjB"
    "uOVJsVE5QWE1yRlYxUHoyQnU0M0kzbkh0Vms5ZmpUakN0cFpRanphayUyRlFUcE9JaHZ1NGNzeWxKYzR2YnJxSktZU3dzZEw"
    "lMkJJU2FnMEZpNHQ5TXl5R2FlcUFXUUphcXQ4c1N6a0o2MVJ5bWdrVE8wUDVaWU9ubTRIY3BXRWw0SFFQRVN1OU9majYlMkJ"
    "jY2NrRDclMkJDYjBVeHdzZFQ1b0g4SXg4VzY3N2hQN0VSSEplWmtBSlNpbmQ0YjRreWhsZGNmbmVTVzREdVhlVmJtaWMxRTZ"
    "IUCUyQnglMkZLYkZQNmpyVUg4RGxsZUdiJTJGaVJOQW5CZTV0VHBSVTlwczFzRDVFOFVxYU9qeVI0b25Qb0V5WmFNSHVIb1d"
    "MMFhjTnBkY2MwTm43QklmRllpZHU3YzV2eGtmN00xUE9PYzdXRGVqU29QaWJoaHFxT0ZpRk1IYmtEZGhZQlZJUlJVYiUyQmF"
    "rZ2hJcWhNeXVodk4yUE9yNEhpakdmQkY4MUYzUGdnUGV4TUloYnVaUWxJZ3NJUzJMVm9pWkpiSFNwMzl5NENySyUyQjVpZ2U"
    "3OWdJVFFVcVJ3YThFMXBkV3JNaUwlMkZLOEpiQnZwS0lTZGd2N0JpUlAyJTJGdlNKaUNBbU5qc1pQeE1NYjlNcFJjRGRUaUR"
    "Xb2U1dWpCemJlVVpUSUhJV21rbnl6WEtNUXpZZU5zRWpyJTJGUFBPcjdxRHlCU2JoaW5pM0xmVk4lMkJUOTNmMyUyRkxucWF"
    "JekRscHZ1JTJGQmpxYkFTU1NrT3Z3VllwaEFvOXVxbkExTm9oZWJyOUVuRCUyQiUyQmFGSmVBSyUyRjdwNkJtMGRVTGdrcDV"
    "RSW1OZ3M5Y0VKJTJCRERSR0dKa3JTcE5OZ296VjNYdmZMbEVLczV3QjB0RjMwc1hsUlEzREhEQkExTCUyRklZWEozN2ttZkU"
    "lMkJ0VkFkSXdudmdxTjVwbzdWZHdnVFFIcGNPMjJvdUVOaDM4bUdoaVhHZzB5R2VmdDNhbjBMaTllSSUyRm9nQVBOM0FTR2t"
    "LJTJCRFZudE1UT1ZXUiUyQkJIWlBrZ0wmWC1BbXotU2lnbmF0dXJlPTZiMzFlOWRiZjQ2YmY0ZmQxYTg5ODAyMDgzMzQzOWY"
    "zYzE4OTQ3MTljZGU2YTExZDFkMzllODliMDhmMmZmMjMmWC1BbXotU2lnbmVkSGVhZGVycz1ob3N0JngtaWQ9R2V0T2JqZWN"
    "0"
)


def sample_recipe() -> Recipe:
    """The recipe shown before the first fetch completes."""
    return Recipe(
        title="Creamy Pasta Rose",
        short_description=(
            "A luscious and comforting pasta dish with a beautiful pink sauce "
            "made from a blend of tomato and cream."
        ),
        ingredients=[
            "200g pasta (penne or spaghetti)",
            "1 cup tomato sauce",
            "1/2 cup heavy cream",
            "2 cloves garlic, minced",
            "1 tablespoon olive oil",
            "Salt and pepper to taste",
            "Grated Parmesan cheese (optional)",
            "Fresh basil leaves (for garnish)",
        ],
        steps=[
            "Cook the pasta in boiling salted water according to package instructions until al dente. Drain and set aside.",
            "In a large skillet, heat the olive oil over medium heat. Add minced garlic and sauté until fragrant, about 1 minute.",
            "Pour in the tomato sauce and cook for 2-3 minutes, stirring occasionally.",
            "Add the heavy cream to the tomato sauce, stirring well to combine. Cook for another 2-3 minutes until the sauce is heated through and turns a lovely pink color.",
            "Season with salt and pepper to taste.",
            "Add the cooked pasta to the skillet and toss to coat evenly with the sauce.",
            "Serve hot, garnished with grated Parmesan cheese and fresh basil leaves if desired.",
        ],
        difficulty="Easy",
        time="20 min",
        image=SAMPLE_IMAGE_URL,
    )


def image_is_url(recipe: Recipe) -> bool:
    """True when the image reference is a remote URL rather than inline data."""
    return recipe.image.startswith(("http://", "https://"))


def format_share_text(recipe: Recipe) -> str:
    """Plain-text version of a recipe for sharing."""
    ingredients = "\n".join(f"• {line}" for line in recipe.ingredients)
    steps = "\n".join(f"• {line}" for line in recipe.steps)
    return (
        f"{recipe.title}\n\n"
        f"{recipe.short_description}\n\n"
        f"Ingredients:\n{ingredients}\n\n"
        f"Steps:\n{steps}"
    )


class RecipeSession:
    """In-memory state of one recipe suggestion session."""

    def __init__(self):
        self._epoch = 0
        self.reset()

    def reset(self) -> None:
        """Back to the initial state. Fetches still in flight are discarded."""
        self._epoch += 1
        self.ingredients: list[Ingredient] = []
        self.prompt: str = ""
        self.gen_num: int = 0
        self.recipes: list[Recipe] = [sample_recipe()]

    def to_dict(self) -> dict:
        return {
            "ingredients": [i.to_dict() for i in self.ingredients],
            "prompt": self.prompt,
            "gen_num": self.gen_num,
            "recipes": [r.to_dict() for r in self.recipes],
        }

    # ── Ingredient tags ────────────────────────────────────────────────────────

    def add_ingredient(self, name: str) -> Optional[Ingredient]:
        """Add an ingredient tag. Blank names are ignored."""
        trimmed = name.strip()
        if not trimmed:
            return None
        ingredient = Ingredient(name=trimmed)
        self.ingredients.append(ingredient)
        return ingredient

    def remove_ingredient(self, ingredient_id: str) -> bool:
        for i, ingredient in enumerate(self.ingredients):
            if ingredient.id == ingredient_id:
                del self.ingredients[i]
                return True
        return False

    def remove_ingredients_at(self, offsets: Iterable[int]) -> None:
        drop = set(offsets)
        self.ingredients = [ing for i, ing in enumerate(self.ingredients) if i not in drop]

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    # ── Recipes ────────────────────────────────────────────────────────────────

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        return next((r for r in self.recipes if r.id == recipe_id), None)

    async def _fetch_and_apply(self, ingredients: list[Ingredient], prompt: str,
                               gen_num: int, replace_list: bool, epoch: int) -> Optional[Recipe]:
        recipe = await recipe_client.fetch_recipe(ingredients, prompt, gen_num)
        if recipe is None:
            return None
        if epoch != self._epoch:
            logger.info("Dropping recipe %r fetched before the session was reset", recipe.title)
            return None
        if replace_list:
            self.recipes = []
        self.recipes.append(recipe)
        logger.info("Recipe list now has %d recipes", len(self.recipes))
        return recipe

    async def refresh(self, bump_first: bool = False) -> list[Optional[Recipe]]:
        """Fetch two recipes: the first replaces the list, the second appends.

        The request parameters are captured before either request starts, so
        results landing after a reset() are dropped.
        Returns the two results (None for a failed fetch).
        """
        if bump_first:
            self.gen_num += 1
        first = self._fetch_and_apply(list(self.ingredients), self.prompt, self.gen_num, True, self._epoch)
        self.gen_num += 1
        second = self._fetch_and_apply(list(self.ingredients), self.prompt, self.gen_num, False, self._epoch)
        return list(await asyncio.gather(first, second))
