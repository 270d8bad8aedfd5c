from fastapi import APIRouter, BackgroundTasks, Depends, Form
from fastapi.exceptions import HTTPException
from fastapi.responses import PlainTextResponse, Response

from grocery_list.core.recipes import RecipeSession, format_share_text, image_is_url
from app.dependencies import get_recipe_session

router = APIRouter(prefix="/recipes", tags=["recipes"])


def _get_or_404(session: RecipeSession, recipe_id: str):
    recipe = session.get_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe


# ── Session state ──────────────────────────────────────────────────────────────

@router.get("")
def recipes_state(session: RecipeSession = Depends(get_recipe_session)):
    return session.to_dict()


@router.delete("")
def recipes_reset(session: RecipeSession = Depends(get_recipe_session)):
    session.reset()
    return session.to_dict()


@router.post("/refresh")
async def recipes_refresh(session: RecipeSession = Depends(get_recipe_session)):
    await session.refresh()
    return session.to_dict()


# ── Ingredients & prompt ───────────────────────────────────────────────────────
# Changes schedule a refresh that lands after the response is sent.

@router.post("/ingredients", status_code=201)
def recipes_add_ingredient(
    background_tasks: BackgroundTasks,
    name: str = Form(""),
    session: RecipeSession = Depends(get_recipe_session),
):
    ingredient = session.add_ingredient(name)
    if ingredient is None:
        raise HTTPException(status_code=400, detail="Ingredient name is required")
    background_tasks.add_task(session.refresh)
    return ingredient.to_dict()


@router.delete("/ingredients/{ingredient_id}", status_code=204)
def recipes_remove_ingredient(
    ingredient_id: str,
    background_tasks: BackgroundTasks,
    session: RecipeSession = Depends(get_recipe_session),
):
    if not session.remove_ingredient(ingredient_id):
        raise HTTPException(status_code=404, detail="Ingredient not found")
    background_tasks.add_task(session.refresh)
    return Response(status_code=204)


@router.post("/prompt")
def recipes_set_prompt(
    background_tasks: BackgroundTasks,
    prompt: str = Form(""),
    session: RecipeSession = Depends(get_recipe_session),
):
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")
    session.set_prompt(prompt)
    background_tasks.add_task(session.refresh, bump_first=True)
    return session.to_dict()


# ── Recipes ────────────────────────────────────────────────────────────────────

@router.get("/{recipe_id}")
def recipes_detail(recipe_id: str, session: RecipeSession = Depends(get_recipe_session)):
    recipe = _get_or_404(session, recipe_id)
    return {**recipe.to_dict(), "imageIsUrl": image_is_url(recipe)}


@router.get("/{recipe_id}/share")
def recipes_share(recipe_id: str, session: RecipeSession = Depends(get_recipe_session)):
    return PlainTextResponse(format_share_text(_get_or_404(session, recipe_id)))
