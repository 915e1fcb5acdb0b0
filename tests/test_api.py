# flake8: noqa
import sys
from pathlib import Path

# Ensure project root is on sys.path so `pantry_match` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

import json
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient  # noqa: E402

from pantry_match import app as app_module
from pantry_match import models


SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
# Use StaticPool so the same in-memory database is shared across connections
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create tables in the in-memory database
models.Base.metadata.create_all(bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app_module.app.dependency_overrides[app_module.get_db] = override_get_db
client = TestClient(app_module.app)


def _create(name, ingredients, steps=("mix",)):
    res = client.post("/api/recipes", json={"name": name, "ingredients": list(ingredients), "steps": list(steps)})
    assert res.status_code == 200
    return res.json()["id"]


def test_api_list_includes_inserted_recipe():
    # insert a recipe directly into the test DB
    db = TestingSessionLocal()
    r = models.Recipe(name="Test Pancake", ingredients=json.dumps(["flour", "egg"]), steps=json.dumps(["mix", "cook"]))
    db.add(r)
    db.commit()
    db.close()

    res = client.get("/api/recipes?page=1&page_size=100")
    assert res.status_code == 200
    data = res.json()
    assert isinstance(data, dict)
    found = next((it for it in data.get("items", []) if it.get("name") == "Test Pancake"), None)
    assert found is not None
    assert found["ingredients"] == ["flour", "egg"]
    assert found["steps"] == ["mix", "cook"]


def test_json_api_crud():
    # create
    payload = {"name": "JsonCRUD", "ingredients": ["a"], "steps": ["b"]}
    res = client.post("/api/recipes", json=payload)
    assert res.status_code == 200
    obj = res.json()
    rid = obj["id"]

    # get
    res = client.get(f"/api/recipes/{rid}")
    assert res.status_code == 200
    assert res.json()["name"] == "JsonCRUD"

    # update
    payload2 = {"name": "JsonCRUD-Updated", "ingredients": ["x"], "steps": ["y"]}
    res = client.put(f"/api/recipes/{rid}", json=payload2)
    assert res.status_code == 200
    assert res.json()["name"] == "JsonCRUD-Updated"

    # delete
    res = client.delete(f"/api/recipes/{rid}")
    assert res.status_code == 200
    assert res.json().get("deleted") is True

    res = client.get(f"/api/recipes/{rid}")
    assert res.status_code == 404


def test_duplicate_recipe_name():
    _create("DupRecipe", ["i1"])
    res = client.post("/api/recipes", json={"name": "DupRecipe", "ingredients": ["i2"], "steps": ["s2"]})
    assert res.status_code == 400


def test_missing_name_validation():
    res = client.post("/api/recipes", json={"ingredients": ["a"], "steps": ["1"]})
    assert res.status_code == 422


def test_search_api():
    _create("Apple Pie", ["apple"])
    _create("Banana Bread", ["banana"])
    _create("Cherry Tart", ["cherry"])

    res = client.get("/api/recipes?q=Banana&page=1&page_size=10")
    assert res.status_code == 200
    data = res.json()
    assert data["total"] == 1
    assert data["items"][0]["name"] == "Banana Bread"


def test_link_headers_pagination():
    # ensure we have multiple items
    for i in range(1, 12):
        client.post("/api/recipes", json={"name": f"Lnk{i}", "ingredients": ["x"], "steps": ["y"]})

    # request page 2 with page_size 5 -> should have prev and next
    res = client.get("/api/recipes?page=2&page_size=5")
    assert res.status_code == 200
    link = res.headers.get("Link")
    assert link is not None
    assert 'rel="prev"' in link and 'rel="next"' in link

    # first page should not have prev
    res = client.get("/api/recipes?page=1&page_size=5")
    assert res.status_code == 200
    link = res.headers.get("Link")
    assert link is not None
    assert 'rel="prev"' not in link and 'rel="next"' in link


def test_groceries_roundtrip():
    res = client.put("/api/groceries", json={"produce": ["tomato", "onion", "tomato"], "dairy": ["butter"]})
    assert res.status_code == 200
    assert res.json() == {"produce": ["tomato", "onion"], "dairy": ["butter"]}

    res = client.post("/api/groceries", json={"category": "dairy", "name": "milk"})
    assert res.status_code == 200
    item_id = res.json()["id"]
    assert client.get("/api/groceries").json()["dairy"] == ["butter", "milk"]

    res = client.delete(f"/api/groceries/{item_id}")
    assert res.status_code == 200
    assert client.get("/api/groceries").json()["dairy"] == ["butter"]

    assert client.delete(f"/api/groceries/{item_id}").status_code == 404


def test_global_ingredients_save_and_usage_count():
    res = client.post("/api/global-ingredients", json={"name": "saffron threads", "category": "flavor_builders"})
    assert res.status_code == 200
    first = res.json()
    assert first["normalized_name"] == "saffron thread"
    assert first["usage_count"] == 1

    res = client.post("/api/global-ingredients", json={"name": "Saffron Thread", "category": "flavor_builders"})
    assert res.json()["id"] == first["id"]
    assert res.json()["usage_count"] == 2

    res = client.get("/api/global-ingredients?q=saffron")
    assert [g["name"] for g in res.json()] == ["saffron threads"]

    res = client.post("/api/global-ingredients", json={"name": "fresh", "category": "misc"})
    assert res.status_code == 400


def test_parse_endpoint():
    res = client.post("/api/ingredients/parse", json={"lines": ["---Sauce---", "2 cups flour, sifted"]})
    assert res.status_code == 200
    parsed = res.json()["parsed"]
    assert parsed[0]["is_header"] is True
    assert parsed[1]["amount"] == "2 cups"
    assert parsed[1]["name"] == "flour"
    assert parsed[1]["prep"] == "sifted"


def test_match_api():
    client.put("/api/groceries", json={"produce": ["tomato", "onion"]})
    res = client.post("/api/match", json={"lines": ["---Veg---", "2 ripe tomatoes", "1 cup flour", ""]})
    assert res.status_code == 200
    data = res.json()
    assert data["inventory_version"] and data["catalog_version"]
    results = data["results"]
    assert [r["recipe_ingredient"] for r in results] == ["ripe tomatoes", "flour"]
    assert results[0]["match_type"] == "exact"
    assert results[1]["match_type"] == "none"


def test_recipe_compatibility_and_shopping_list():
    client.put("/api/groceries", json={"produce": ["tomato", "onion"]})
    rid = _create("Scenario A", ["2 cups tomato, diced", "1 onion", "1 cup flour"])

    res = client.get(f"/api/recipes/{rid}/compatibility")
    assert res.status_code == 200
    report = res.json()
    assert report["recipe_id"] == str(rid)
    assert report["total_ingredients"] == 3
    assert report["compatibility_score"] == 67
    assert report["confidence_score"] == 100
    assert [m["recipe_ingredient"] for m in report["missing_ingredients"]] == ["flour"]

    res = client.get(f"/api/recipes/{rid}/shopping-list")
    assert res.status_code == 200
    assert res.text == "flour"

    assert client.get("/api/recipes/999999/compatibility").status_code == 404


def test_compatibility_follows_pantry_and_recipe_changes():
    client.put("/api/groceries", json={"produce": ["tomato"]})
    rid = _create("Changing Salad", ["tomato", "cucumber"])
    assert client.get(f"/api/recipes/{rid}/compatibility").json()["compatibility_score"] == 50

    # pantry change -> new index version
    client.post("/api/groceries", json={"category": "produce", "name": "cucumbers"})
    assert client.get(f"/api/recipes/{rid}/compatibility").json()["compatibility_score"] == 100

    # recipe edit -> cached report dropped
    client.put(f"/api/recipes/{rid}", json={"name": "Changing Salad", "ingredients": ["tomato", "cucumber", "feta"], "steps": []})
    assert client.get(f"/api/recipes/{rid}/compatibility").json()["compatibility_score"] == 67


def test_all_compatibility_sorted():
    client.put("/api/groceries", json={"produce": ["tomato", "onion"]})
    res = client.get("/api/compatibility?limit=500")
    assert res.status_code == 200
    scores = [r["compatibility_score"] for r in res.json()]
    assert scores == sorted(scores, reverse=True)
    assert len(scores) > 0


def test_blank_grocery_name_rejected():
    res = client.post("/api/groceries", json={"category": "produce", "name": "   "})
    assert res.status_code == 400
    res = client.post("/api/groceries", json={"category": " ", "name": "leek"})
    assert res.status_code == 400
    assert "" not in client.get("/api/groceries").json().get("produce", [])


def test_global_ingredient_category_is_suggested():
    res = client.post("/api/global-ingredients", json={"name": "lamb shoulder"})
    assert res.status_code == 200
    assert res.json()["category"] == "proteins"


def test_unknown_ingredients_endpoint():
    client.put("/api/groceries", json={"produce": ["tomato"]})
    rid = _create("Unknowns", ["---Main---", "2 tomatoes", "1 cup pearl barley", "2 pork chops", "---"])
    res = client.get(f"/api/recipes/{rid}/unknown-ingredients")
    assert res.status_code == 200
    data = res.json()
    assert [s["ingredient"] for s in data] == ["pearl barley", "pork chops"]
    assert [s["suggested_category"] for s in data] == ["pantry_staples", "proteins"]

    assert client.get("/api/recipes/999999/unknown-ingredients").status_code == 404
