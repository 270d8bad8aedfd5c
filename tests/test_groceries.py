import contextvars
import json
import threading
import time

import pytest

from grocery_list.config import get_setting, set_setting
from grocery_list.core import groceries
from grocery_list.core.groceries import DuplicateItemError, GroceryList
from grocery_list.db.database import init_db, override_db_path
from grocery_list.db.models import GroceryItem


@pytest.fixture
def db(tmp_path):
    path = tmp_path / "groceries.db"
    with override_db_path(path):
        init_db()
        yield path


# ── Persistence ────────────────────────────────────────────────────────────────

def test_load_empty_store(db):
    assert groceries.load() == []


def test_save_then_load_keeps_order(db):
    items = [GroceryItem(name="Milk"), GroceryItem(name="Eggs", purchased=True)]
    groceries.save(items)
    loaded = groceries.load()
    assert [(i.id, i.name, i.purchased) for i in loaded] == [
        (items[0].id, "Milk", False),
        (items[1].id, "Eggs", True),
    ]


def test_save_uses_single_key(db):
    groceries.save([GroceryItem(name="Bread", id="ABC")])
    stored = json.loads(get_setting("groceryList"))
    assert stored == [{"id": "ABC", "name": "Bread", "purchased": False}]


def test_load_corrupt_json_is_empty(db):
    set_setting("groceryList", "{not json")
    assert groceries.load() == []


def test_load_wrong_shape_is_empty(db):
    set_setting("groceryList", json.dumps({"name": "Milk"}))
    assert groceries.load() == []
    set_setting("groceryList", json.dumps([{"purchased": True}]))
    assert groceries.load() == []


# ── GroceryList ────────────────────────────────────────────────────────────────

def test_add_trims_and_persists(db):
    gl = GroceryList()
    item = gl.add("  Apples \n")
    assert item.name == "Apples"
    assert [i.name for i in groceries.load()] == ["Apples"]


def test_add_blank_is_ignored(db):
    gl = GroceryList()
    assert gl.add("   ") is None
    assert len(gl) == 0
    assert get_setting("groceryList") is None


def test_add_duplicate_case_insensitive(db):
    gl = GroceryList()
    gl.add("Milk")
    with pytest.raises(DuplicateItemError):
        gl.add(" mILK ")
    assert [i.name for i in gl.items] == ["Milk"]


def test_toggle_flips_flag(db):
    gl = GroceryList()
    item = gl.add("Cheese")
    assert gl.toggle_purchased(item.id).purchased is True
    assert groceries.load()[0].purchased is True
    assert gl.toggle_purchased(item.id).purchased is False


def test_toggle_unknown_id(db):
    assert GroceryList().toggle_purchased("nope") is None


def test_load_drops_purchased(db):
    gl = GroceryList()
    gl.add("Butter")
    bought = gl.add("Jam")
    gl.toggle_purchased(bought.id)

    reloaded = GroceryList()
    reloaded.load()
    assert [i.name for i in reloaded.items] == ["Butter"]


def test_rename(db):
    gl = GroceryList()
    item = gl.add("Tomatos")
    assert gl.rename(item.id, "Tomatoes").name == "Tomatoes"
    assert groceries.load()[0].name == "Tomatoes"
    assert gl.rename(item.id, "") is None
    assert gl.get(item.id).name == "Tomatoes"


def test_delete_and_delete_at(db):
    gl = GroceryList()
    a = gl.add("A")
    gl.add("B")
    gl.add("C")
    assert gl.delete(a.id) is True
    assert gl.delete(a.id) is False
    gl.delete_at([1])
    assert [i.name for i in groceries.load()] == ["B"]


def test_format_text(db):
    gl = GroceryList()
    assert gl.format_text() == "No items needed."
    gl.add("Rice")
    beans = gl.add("Beans")
    gl.toggle_purchased(beans.id)
    assert gl.format_text() == "[ ] Rice\n[x] Beans"


# ── Concurrent changes ─────────────────────────────────────────────────────────

def _slow_first_write(monkeypatch, started: threading.Event):
    """Make the first settings write stall, like a writer waiting on SQLite's lock."""
    real_set = groceries.set_setting
    calls = []

    def slow_set(key, value):
        if not calls:
            calls.append(key)
            started.set()
            time.sleep(0.2)
        real_set(key, value)

    monkeypatch.setattr(groceries, "set_setting", slow_set)


def _in_thread(target, *args):
    # Threads don't inherit the DB path override
    ctx = contextvars.copy_context()
    return threading.Thread(target=ctx.run, args=(target, *args))


def test_concurrent_adds_keep_disk_in_step(db, monkeypatch):
    started = threading.Event()
    _slow_first_write(monkeypatch, started)
    gl = GroceryList()

    t = _in_thread(gl.add, "Milk")
    t.start()
    assert started.wait(timeout=2)
    gl.add("Eggs")
    t.join()

    assert [i.name for i in gl.items] == ["Milk", "Eggs"]
    assert [i.name for i in groceries.load()] == ["Milk", "Eggs"]


def test_concurrent_duplicate_adds_only_one_wins(db, monkeypatch):
    started = threading.Event()
    _slow_first_write(monkeypatch, started)
    gl = GroceryList()
    rejected = []

    def add_milk(name):
        try:
            gl.add(name)
        except DuplicateItemError:
            rejected.append(name)

    threads = [_in_thread(add_milk, "Milk"), _in_thread(add_milk, "milk")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(rejected) == 1
    assert len(gl) == 1
    assert len(groceries.load()) == 1


def test_toggle_while_add_is_saving(db, monkeypatch):
    gl = GroceryList()
    bread = gl.add("Bread")
    started = threading.Event()
    _slow_first_write(monkeypatch, started)

    t = _in_thread(gl.add, "Honey")
    t.start()
    assert started.wait(timeout=2)
    gl.toggle_purchased(bread.id)
    t.join()

    stored = {i.name: i.purchased for i in groceries.load()}
    assert stored == {"Bread": True, "Honey": False}


# ── HTTP ───────────────────────────────────────────────────────────────────────

def test_requires_login(client):
    from fastapi.testclient import TestClient
    from app.main import app
    resp = TestClient(app).get("/groceries")
    assert resp.status_code == 401


def test_health_is_public(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_api_add_and_list(authed_client):
    resp = authed_client.post("/groceries", data={"name": "Api Carrots"})
    assert resp.status_code == 201
    item = resp.json()
    assert item["name"] == "Api Carrots"
    assert item["purchased"] is False

    names = [i["name"] for i in authed_client.get("/groceries").json()]
    assert "Api Carrots" in names


def test_api_add_duplicate(authed_client):
    authed_client.post("/groceries", data={"name": "Api Onions"})
    resp = authed_client.post("/groceries", data={"name": "api onions"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "This item already exists in the list."


def test_api_add_blank(authed_client):
    resp = authed_client.post("/groceries", data={"name": "  "})
    assert resp.status_code == 400


def test_api_toggle_edit_delete(authed_client):
    item = authed_client.post("/groceries", data={"name": "Api Leeks"}).json()

    resp = authed_client.post(f"/groceries/{item['id']}/toggle")
    assert resp.json()["purchased"] is True

    resp = authed_client.post(f"/groceries/{item['id']}/edit", data={"name": "Api Shallots"})
    assert resp.json()["name"] == "Api Shallots"

    resp = authed_client.delete(f"/groceries/{item['id']}")
    assert resp.status_code == 204
    assert authed_client.get(f"/groceries/{item['id']}").status_code == 404


def test_api_unknown_item(authed_client):
    assert authed_client.post("/groceries/missing/toggle").status_code == 404
    assert authed_client.post("/groceries/missing/edit", data={"name": "x"}).status_code == 404
    assert authed_client.delete("/groceries/missing").status_code == 404


def test_api_export(authed_client):
    authed_client.post("/groceries", data={"name": "Api Flour"})
    resp = authed_client.get("/groceries/export")
    assert resp.status_code == 200
    assert "text/plain" in resp.headers["content-type"]
    assert "[ ] Api Flour" in resp.text
