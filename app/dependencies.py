import os
from itsdangerous import BadData, URLSafeTimedSerializer
from fastapi import Request

from grocery_list.core.groceries import GroceryList
from grocery_list.core.recipes import RecipeSession

SESSION_COOKIE = "gl_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days


def _get_signer() -> URLSafeTimedSerializer:
    key = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")
    return URLSafeTimedSerializer(key)


def create_session_token() -> str:
    return _get_signer().dumps("ok")


def verify_session_token(token: str) -> bool:
    try:
        _get_signer().loads(token, max_age=SESSION_MAX_AGE)
        return True
    except BadData:
        return False


# Paths that don't require auth
_PUBLIC_PREFIXES = ("/login", "/health")


def is_public(path: str) -> bool:
    return any(path.startswith(p) for p in _PUBLIC_PREFIXES)


def get_grocery_list(request: Request) -> GroceryList:
    return request.app.state.groceries


def get_recipe_session(request: Request) -> RecipeSession:
    return request.app.state.recipe_session
