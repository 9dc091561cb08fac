"""HTTP surface: routing, capability gates and error translation."""

MARGARITA = {
    "name": "Margarita",
    "description": "Classic sour",
    "preparation_time_minutes": 5,
    "ingredients": [
        {"name": "tequila", "quantity": 2, "unit": "oz"},
        {"name": "lime juice", "quantity": 1, "unit": "oz"},
        {"name": "triple sec", "quantity": 0.5, "unit": "oz"},
    ],
    "instruction": "Shake with ice",
}


async def create_margarita(client, auth, user):
    auth.user = user
    response = await client.post("/cocktail-recipes/", json=MARGARITA)
    assert response.status_code == 201
    return response.json()


async def test_anonymous_can_browse_but_not_create(client, auth, member):
    await create_margarita(client, auth, member)
    auth.user = None

    listing = await client.get("/cocktail-recipes/")
    assert listing.status_code == 200
    assert listing.json()["total"] == 1

    response = await client.post("/cocktail-recipes/", json=MARGARITA)
    assert response.status_code == 401


async def test_create_returns_hydrated_cocktail(client, auth, member):
    body = await create_margarita(client, auth, member)

    assert body["name"] == "Margarita"
    assert [s["step_order"] for s in body["steps"]] == [1, 2, 3]
    assert [s["ingredient"] for s in body["steps"]] == ["tequila", "lime juice", "triple sec"]
    assert {s["instruction"] for s in body["steps"]} == {"Shake with ice"}

    fetched = await client.get(f"/cocktail-recipes/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["steps"] == body["steps"]


async def test_create_validation_errors_are_400(client, auth, member):
    auth.user = member

    too_few = dict(MARGARITA, ingredients=MARGARITA["ingredients"][:1])
    response = await client.post("/cocktail-recipes/", json=too_few)
    assert response.status_code == 400
    assert "at least 2 ingredients" in response.json()["detail"]

    duplicated = dict(MARGARITA, ingredients=[{"name": "Gin"}, {"name": "gin"}])
    response = await client.post("/cocktail-recipes/", json=duplicated)
    assert response.status_code == 400
    assert response.json()["detail"] == "Duplicate ingredient: gin"

    response = await client.post("/cocktail-recipes/", json=dict(MARGARITA, name="   "))
    assert response.status_code == 400


async def test_update_and_delete_need_privilege(client, auth, member, admin):
    created = await create_margarita(client, auth, member)
    url = f"/cocktail-recipes/{created['id']}"

    response = await client.put(url, json={"description": "new"})
    assert response.status_code == 403
    response = await client.delete(url)
    assert response.status_code == 403
    unchanged = await client.get(url)
    assert unchanged.status_code == 200
    assert unchanged.json() == created

    auth.user = admin
    response = await client.put(url, json={"description": "new"})
    assert response.status_code == 200
    assert response.json()["description"] == "new"
    assert response.json()["preparation_time_minutes"] == 5

    response = await client.delete(url)
    assert response.status_code == 204
    response = await client.delete(url)
    assert response.status_code == 404
    response = await client.get(url)
    assert response.status_code == 404


async def test_update_missing_cocktail_is_404(client, auth, admin):
    auth.user = admin

    response = await client.put("/cocktail-recipes/999", json={"notes": "x"})

    assert response.status_code == 404


async def test_search_cocktails(client, auth, member):
    await create_margarita(client, auth, member)

    response = await client.get("/cocktail-recipes/search", params={"name": "GARI"})
    assert response.json()["total"] == 1

    response = await client.get("/cocktail-recipes/search", params={"name": "mojito"})
    assert response.json()["items"] == []


async def test_ingredient_endpoints(client, auth, member, admin):
    await create_margarita(client, auth, member)

    response = await client.get("/ingredients/search", params={"name": "JUICE"})
    assert [i["name"] for i in response.json()["items"]] == ["lime juice"]
    lime_id = response.json()["items"][0]["id"]

    response = await client.post("/ingredients/", json={"name": " Lime Juice "})
    assert response.status_code == 201
    assert response.json()["id"] == lime_id

    response = await client.delete(f"/ingredients/{lime_id}")
    assert response.status_code == 403

    auth.user = admin
    response = await client.delete(f"/ingredients/{lime_id}")
    assert response.status_code == 204
    response = await client.get(f"/ingredients/{lime_id}")
    assert response.status_code == 404

    listing = await client.get("/cocktail-recipes/")
    steps = listing.json()["items"][0]["steps"]
    assert [s["ingredient"] for s in steps] == ["tequila", "triple sec"]


async def test_favorites_flow(client, auth, member):
    created = await create_margarita(client, auth, member)
    cocktail_id = created["id"]

    response = await client.post(f"/favorites/{cocktail_id}")
    assert response.status_code == 201
    response = await client.post(f"/favorites/{cocktail_id}")
    assert response.status_code == 409

    response = await client.get("/favorites/count")
    assert response.json() == {"count": 1}
    response = await client.get("/favorites/")
    assert [c["name"] for c in response.json()] == ["Margarita"]

    response = await client.post(f"/favorites/toggle/{cocktail_id}")
    assert response.json() == {"cocktail_id": cocktail_id, "is_favorite": False}
    response = await client.get(f"/favorites/check/{cocktail_id}")
    assert response.json()["is_favorite"] is False

    response = await client.delete(f"/favorites/{cocktail_id}")
    assert response.status_code == 404
    response = await client.post("/favorites/toggle/999")
    assert response.status_code == 404


async def test_favorites_require_login(client, auth):
    auth.user = None

    response = await client.get("/favorites/")

    assert response.status_code == 401
