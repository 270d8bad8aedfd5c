import os
import pytest

from grocery_list.db.models import Recipe


@pytest.fixture(scope="session", autouse=True)
def set_test_env(tmp_path_factory):
    db_file = tmp_path_factory.mktemp("data") / "test.db"
    os.environ["DB_PATH"] = str(db_file)
    os.environ["APP_PASSWORD"] = "testpass"
    os.environ["SECRET_KEY"] = "test-secret-key-for-testing"


@pytest.fixture(scope="session")
def client(set_test_env):
    from fastapi.testclient import TestClient
    from app.main import app
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture(scope="session")
def authed_client(client):
    client.post("/login", data={"password": "testpass"})
    return client


@pytest.fixture
def fake_fetch(monkeypatch):
    """Replace the recipe endpoint call. Records (ingredient names, prompt, gen_num)."""
    from grocery_list.core import recipe_client

    calls = []

    async def _fetch(ingredients, prompt="", gen_num=0, client=None):
        calls.append(([i.name for i in ingredients], prompt, gen_num))
        return Recipe(
            title=f"Recipe {gen_num}",
            short_description="Generated",
            ingredients=[i.name for i in ingredients],
            steps=["Cook it."],
            difficulty="Easy",
            time="10 min",
            image="https://example.com/img.jpg",
        )

    monkeypatch.setattr(recipe_client, "fetch_recipe", _fetch)
    return calls
