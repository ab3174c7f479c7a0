from tests.helpers import bearer


async def test_favorites_empty_for_new_user(api, customer):
    response = await api.get("/favorites", headers=bearer(customer[1]))
    assert response.status_code == 200
    assert response.json() == {"favorites": []}


async def test_add_then_get_includes_item(api, customer):
    headers = bearer(customer[1])
    response = await api.post("/favorites", json={"itemId": "3"}, headers=headers)
    assert response.json() == {"favorites": ["3"]}
    assert "3" in (await api.get("/favorites", headers=headers)).json()["favorites"]


async def test_add_is_idempotent_and_keeps_order(api, customer):
    headers = bearer(customer[1])
    for item_id in ("5", "1", "5"):
        await api.post("/favorites", json={"itemId": item_id}, headers=headers)
    assert (await api.get("/favorites", headers=headers)).json()["favorites"] == ["5", "1"]


async def test_remove_then_get_excludes_item(api, customer):
    headers = bearer(customer[1])
    await api.post("/favorites", json={"itemId": "2"}, headers=headers)
    await api.post("/favorites", json={"itemId": "4"}, headers=headers)

    response = await api.delete("/favorites/2", headers=headers)
    assert response.json() == {"favorites": ["4"]}
    assert "2" not in (await api.get("/favorites", headers=headers)).json()["favorites"]


async def test_repeated_get_is_stable(api, customer):
    headers = bearer(customer[1])
    await api.post("/favorites", json={"itemId": "7"}, headers=headers)
    first = (await api.get("/favorites", headers=headers)).json()
    second = (await api.get("/favorites", headers=headers)).json()
    assert first == second


async def test_favorites_are_per_user(api, gotrue, customer):
    _, other_token = gotrue.add_user("bola@sacyskitchen.ng", "Bola")
    await api.post("/favorites", json={"itemId": "9"}, headers=bearer(customer[1]))
    assert (await api.get("/favorites", headers=bearer(other_token))).json()["favorites"] == []


async def test_favorites_require_token(api):
    assert (await api.get("/favorites")).status_code == 401
    assert (await api.post("/favorites", json={"itemId": "1"})).status_code == 401
    assert (await api.delete("/favorites/1")).status_code == 401
