"""Recipe generation endpoint client.

fetch_recipe() does one unauthenticated GET and decodes a single recipe
object from the JSON body.  There is no retry or backoff: every failure is
logged and reported as None.
"""

import asyncio
import logging
from typing import Optional

import httpx

from grocery_list.config import (
    RECIPE_REQUEST_TIMEOUT, RECIPE_RESOURCE_TIMEOUT, get_recipe_api_url,
)
from grocery_list.db.models import Ingredient, Recipe

logger = logging.getLogger(__name__)

HEADERS = {
    "Accept": "application/json",
    "User-Agent": "Mozilla/5.0",
}


def build_query(prompt: str, gen_num: int) -> str:
    """Prefix the prompt with the generation counter so repeat requests differ."""
    if prompt:
        return f"num: {gen_num} [IGNORE].   {prompt}"
    return f"num: {gen_num} [IGNORE]"


def build_params(ingredients: list[Ingredient], prompt: str, gen_num: int) -> list[tuple[str, str]]:
    params = []
    if ingredients:
        params.append(("ingredients", ", ".join(i.name for i in ingredients)))
    params.append(("q", build_query(prompt, gen_num)))
    return params


async def _get(client: httpx.AsyncClient, url: str, params) -> httpx.Response:
    return await asyncio.wait_for(
        client.get(url, params=params, headers=HEADERS),
        timeout=RECIPE_RESOURCE_TIMEOUT,
    )


async def fetch_recipe(
    ingredients: list[Ingredient],
    prompt: str = "",
    gen_num: int = 0,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[Recipe]:
    """Request one generated recipe. Returns None on any failure."""
    url = get_recipe_api_url()
    params = build_params(ingredients, prompt, gen_num)
    logger.info("Fetching recipe with ingredients: %s", [i.name for i in ingredients])

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=RECIPE_REQUEST_TIMEOUT) as own_client:
                response = await _get(own_client, url, params)
        else:
            response = await _get(client, url, params)
    except httpx.InvalidURL as e:
        logger.error("Invalid recipe URL %r: %s", url, e)
        return None
    except (httpx.HTTPError, asyncio.TimeoutError) as e:
        logger.error("Recipe request failed: %r", e)
        return None

    logger.info("Recipe endpoint status code: %s", response.status_code)
    logger.debug("Recipe response body: %s", response.text)

    try:
        recipe = Recipe.from_dict(response.json())
    except ValueError as e:
        # JSONDecodeError and RecipeDecodeError are both ValueErrors
        logger.error("Failed to decode recipe: %s", e)
        return None
    logger.info("Received recipe %r", recipe.title)
    return recipe
