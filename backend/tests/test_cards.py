import uuid

from models.card import Card

def create_card(client, headers, front="Front 1", back="Back 1", **extra):
    response = client.post(
        "/api/cards",
        json={"front_content": front, "back_content": back, **extra},
        headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()

def test_create_card(client, auth_headers):
    data = create_card(client, auth_headers())
    assert data["front_content"] == "Front 1"
    assert data["back_content"] == "Back 1"
    assert data["source_type"] == "manual"
    uuid.UUID(data["id"])

def test_create_card_requires_user(client):
    response = client.post("/api/cards", json={"front_content": "F", "back_content": "B"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized", "code": "UNAUTHORIZED"}

def test_create_card_validation(client, auth_headers):
    response = client.post(
        "/api/cards",
        json={"front_content": "x" * 201, "back_content": ""},
        headers=auth_headers()
    )
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    fields = {item["field"] for item in body["details"]["fields"]}
    assert fields == {"front_content", "back_content"}

def test_create_card_invalid_source_type(client, auth_headers):
    response = client.post(
        "/api/cards",
        json={"front_content": "F", "back_content": "B", "source_type": "imported"},
        headers=auth_headers()
    )
    assert response.status_code == 400

def test_create_card_in_set(client, auth_headers):
    set_id = client.post("/api/card-sets", json={"name": "Set"}, headers=auth_headers()).json()["id"]
    card = create_card(client, auth_headers(), set_id=set_id)

    detail = client.get(f"/api/card-sets/{set_id}", headers=auth_headers()).json()
    assert [c["id"] for c in detail["cards"]["data"]] == [card["id"]]

def test_create_card_in_foreign_set(client, auth_headers):
    set_id = client.post("/api/card-sets", json={"name": "Set"}, headers=auth_headers("user-2")).json()["id"]
    response = client.post(
        "/api/cards",
        json={"front_content": "F", "back_content": "B", "set_id": set_id},
        headers=auth_headers()
    )
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"

def test_get_card(client, auth_headers):
    card = create_card(client, auth_headers())
    response = client.get(f"/api/cards/{card['id']}", headers=auth_headers())
    assert response.status_code == 200
    assert response.json()["front_content"] == "Front 1"

def test_get_card_of_other_user(client, auth_headers):
    card = create_card(client, auth_headers())
    response = client.get(f"/api/cards/{card['id']}", headers=auth_headers("user-2"))
    assert response.status_code == 404
    assert response.json() == {"error": "Card not found", "code": "NOT_FOUND"}

def test_get_card_invalid_id(client, auth_headers):
    response = client.get("/api/cards/not-a-uuid", headers=auth_headers())
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"

def test_update_card(client, auth_headers):
    card = create_card(client, auth_headers())
    response = client.put(
        f"/api/cards/{card['id']}",
        json={"front_content": "Updated Front", "back_content": "Updated Back"},
        headers=auth_headers()
    )
    assert response.status_code == 200
    data = response.json()
    assert data["front_content"] == "Updated Front"
    assert data["back_content"] == "Updated Back"

def test_delete_card_is_soft(client, test_db, auth_headers):
    card = create_card(client, auth_headers())
    response = client.delete(f"/api/cards/{card['id']}", headers=auth_headers())
    assert response.status_code == 204

    assert client.get(f"/api/cards/{card['id']}", headers=auth_headers()).status_code == 404
    assert client.get("/api/cards", headers=auth_headers()).json()["pagination"]["total"] == 0

    row = test_db.get(Card, card["id"])
    assert row is not None
    assert row.is_deleted is True
    assert row.deleted_at is not None

def test_list_cards_pagination(client, auth_headers):
    for i in range(15):
        create_card(client, auth_headers(), front=f"Front {i}", back=f"Back {i}")

    response = client.get("/api/cards?page=2&limit=10", headers=auth_headers())
    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == 5
    assert body["pagination"] == {"total": 15, "page": 2, "limit": 10, "pages": 2}

def test_list_cards_newest_first(client, auth_headers):
    create_card(client, auth_headers(), front="Old")
    create_card(client, auth_headers(), front="New")
    data = client.get("/api/cards", headers=auth_headers()).json()["data"]
    assert [c["front_content"] for c in data] == ["New", "Old"]

def test_list_cards_empty(client, auth_headers):
    body = client.get("/api/cards", headers=auth_headers()).json()
    assert body == {"data": [], "pagination": {"total": 0, "page": 1, "limit": 10, "pages": 0}}

def test_list_cards_filter_by_source_type(client, auth_headers):
    create_card(client, auth_headers(), front="Manual")
    create_card(client, auth_headers(), front="AI", source_type="ai")

    data = client.get("/api/cards?source_type=ai", headers=auth_headers()).json()["data"]
    assert [c["front_content"] for c in data] == ["AI"]

def test_list_cards_limit_bounds(client, auth_headers):
    assert client.get("/api/cards?limit=101", headers=auth_headers()).status_code == 400
    assert client.get("/api/cards?page=0", headers=auth_headers()).status_code == 400

def test_list_cards_isolated_per_user(client, auth_headers):
    create_card(client, auth_headers())
    body = client.get("/api/cards", headers=auth_headers("user-2")).json()
    assert body["pagination"]["total"] == 0
