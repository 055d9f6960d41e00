import pytest

TEST_RECIPE = {
    "name": "test recipe",
    "preptime": 0.1,
    "difficulty": 2,
    "vegetarian": True,
}

UPDATED_RECIPE = {
    "name": "test recipe - updated",
    "preptime": 11.11,
    "difficulty": 3,
    "vegetarian": False,
}


def test_empty_table_lists_empty_array(client):
    resp = client.get("/v1/recipes")
    assert resp.status_code == 200
    assert resp.text == "[]"


def test_responses_declare_utf8_json(client):
    resp = client.get("/v1/recipes")
    assert resp.headers["content-type"] == "application/json; charset=utf-8"

    resp = client.get("/v1/recipes/11")
    assert resp.headers["content-type"] == "application/json; charset=utf-8"


def test_get_nonexistent_recipe(client):
    resp = client.get("/v1/recipes/11")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Recipe not found"}


def test_create_recipe(client):
    resp = client.post("/v1/recipes", json=TEST_RECIPE)
    assert resp.status_code == 201

    body = resp.json()
    assert body["id"] == 1
    assert body["name"] == "test recipe"
    assert body["preptime"] == 0.1
    assert body["difficulty"] == 2
    assert body["vegetarian"] is True


def test_create_recipe_applies_defaults(client):
    resp = client.post("/v1/recipes", json={"name": "toast", "difficulty": 1})
    assert resp.status_code == 201
    assert resp.json() == {
        "id": 1,
        "name": "toast",
        "preptime": 0.0,
        "difficulty": 1,
        "vegetarian": False,
    }


@pytest.mark.parametrize(
    "payload",
    [
        b"{not json",
        b"",
        b"[]",
        b'{"name": "x", "preptime": "fast", "difficulty": 2}',
        b'{"name": "x", "difficulty": "2"}',
        b'{"name": "x", "difficulty": 2, "vegetarian": "yes"}',
        b'{"name": "x", "difficulty": 2, "calories": 300}',
        b'{"preptime": 1.0, "difficulty": 2}',
        b'{"name": "", "difficulty": 2}',
    ],
)
def test_create_recipe_invalid_payload(client, payload):
    resp = client.post(
        "/v1/recipes",
        content=payload,
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request payload"}


@pytest.mark.parametrize("difficulty", [0, 4])
def test_create_recipe_difficulty_out_of_range_is_store_error(client, difficulty):
    resp = client.post("/v1/recipes", json={**TEST_RECIPE, "difficulty": difficulty})
    assert resp.status_code == 500
    assert "CHECK constraint failed" in resp.json()["error"]

    assert client.get("/v1/recipes").json() == []


def test_get_recipe(client, add_recipes):
    add_recipes(1)

    resp = client.get("/v1/recipes/1")
    assert resp.status_code == 200
    assert resp.json() == {
        "id": 1,
        "name": "Recipe 0",
        "preptime": 10.0,
        "difficulty": 1,
        "vegetarian": True,
    }


@pytest.mark.parametrize("method", ["put", "patch"])
def test_update_recipe_replaces_all_fields(client, add_recipes, method):
    add_recipes(1)
    original = client.get("/v1/recipes/1").json()

    resp = getattr(client, method)("/v1/recipes/1", json=UPDATED_RECIPE)
    assert resp.status_code == 200

    body = resp.json()
    assert body["id"] == original["id"]
    for field in ("name", "preptime", "difficulty", "vegetarian"):
        assert body[field] != original[field]
        assert body[field] == UPDATED_RECIPE[field]

    assert client.get("/v1/recipes/1").json() == body


def test_update_nonexistent_recipe_echoes_input(client):
    resp = client.put("/v1/recipes/42", json=UPDATED_RECIPE)
    assert resp.status_code == 200
    assert resp.json() == {"id": 42, **UPDATED_RECIPE}

    assert client.get("/v1/recipes/42").status_code == 404


def test_update_recipe_invalid_payload(client, add_recipes):
    add_recipes(1)

    resp = client.put(
        "/v1/recipes/1",
        content=b'{"name": 12}',
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request payload"}


def test_update_recipe_difficulty_out_of_range(client, add_recipes):
    add_recipes(1)

    resp = client.patch("/v1/recipes/1", json={**UPDATED_RECIPE, "difficulty": 9})
    assert resp.status_code == 500
    assert "CHECK constraint failed" in resp.json()["error"]
    assert client.get("/v1/recipes/1").json()["name"] == "Recipe 0"


def test_delete_recipe(client, add_recipes):
    add_recipes(1)
    assert client.get("/v1/recipes/1").status_code == 200

    resp = client.delete("/v1/recipes/1")
    assert resp.status_code == 200
    assert resp.json() == {"result": "success"}

    assert client.get("/v1/recipes/1").status_code == 404


def test_delete_nonexistent_recipe_succeeds(client):
    resp = client.delete("/v1/recipes/7")
    assert resp.status_code == 200
    assert resp.json() == {"result": "success"}


def test_delete_recipe_cascades_to_ratings(client, add_recipes, count_ratings):
    add_recipes(2)
    for rating in (3, 4):
        client.post("/v1/recipes/1/rating", json={"rating": rating})
    client.post("/v1/recipes/2/rating", json={"rating": 5})
    assert count_ratings() == 3

    client.delete("/v1/recipes/1")

    assert count_ratings() == 1


@pytest.mark.parametrize("recipe_id", ["abc", "-1", "1.5", "99999999999999999999"])
@pytest.mark.parametrize(
    "method, path, payload",
    [
        ("GET", "/v1/recipes/{}", None),
        ("PUT", "/v1/recipes/{}", UPDATED_RECIPE),
        ("PATCH", "/v1/recipes/{}", UPDATED_RECIPE),
        ("DELETE", "/v1/recipes/{}", None),
        ("POST", "/v1/recipes/{}/rating", {"rating": 3}),
    ],
)
def test_invalid_recipe_id(client, method, path, payload, recipe_id):
    resp = client.request(method, path.format(recipe_id), json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid recipe ID"}


def test_invalid_recipe_id_wins_over_invalid_payload(client):
    resp = client.put(
        "/v1/recipes/abc",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid recipe ID"}


def test_list_recipes_paginates_by_id(client, add_recipes):
    add_recipes(13)

    resp = client.get("/v1/recipes", params={"count": 5, "start": 2})
    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()] == [3, 4, 5, 6, 7]

    resp = client.get("/v1/recipes", params={"count": 5, "start": 12})
    assert [r["id"] for r in resp.json()] == [13]


@pytest.mark.parametrize("count", ["0", "11", "-3", "abc", ""])
def test_list_recipes_count_out_of_range_defaults_to_ten(client, add_recipes, count):
    add_recipes(13)

    resp = client.get("/v1/recipes", params={"count": count})
    assert len(resp.json()) == 10


@pytest.mark.parametrize("start", ["-5", "abc"])
def test_list_recipes_bad_start_defaults_to_zero(client, add_recipes, start):
    add_recipes(3)

    resp = client.get("/v1/recipes", params={"start": start})
    assert [r["id"] for r in resp.json()] == [1, 2, 3]


def test_list_recipes_past_the_end(client, add_recipes):
    add_recipes(3)

    resp = client.get("/v1/recipes", params={"start": 30})
    assert resp.status_code == 200
    assert resp.text == "[]"
