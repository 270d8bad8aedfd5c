from contextlib import asynccontextmanager
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from grocery_list.config import configure_logging
from grocery_list.core.groceries import GroceryList
from grocery_list.core.recipes import RecipeSession
from grocery_list.db.database import init_db
from app.dependencies import verify_session_token, is_public, SESSION_COOKIE
from app.routers import auth, groceries, recipes


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    grocery_list = GroceryList()
    grocery_list.load()
    app.state.groceries = grocery_list
    app.state.recipe_session = RecipeSession()
    yield


app = FastAPI(lifespan=lifespan)


@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    if not is_public(request.url.path):
        token = request.cookies.get(SESSION_COOKIE)
        if not token or not verify_session_token(token):
            return JSONResponse({"detail": "Not authenticated"}, status_code=401)
    return await call_next(request)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(auth.router)
app.include_router(groceries.router)
app.include_router(recipes.router)
