def test_habits_require_auth(client):
    resp = client.get("/habits")
    assert resp.status_code == 401
    assert resp.json()["error"] == {"code": "UNAUTHORIZED", "message": "Missing bearer credential"}

    resp = client.get("/habits", headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_create_list_and_patch_habit(client, auth_headers):
    create = client.post("/habits", json={"id": "h1", "name": "  Meditate ", "color": "#0f0"}, headers=auth_headers)
    assert create.status_code == 201
    habit = create.json()["habit"]
    assert habit["id"] == "h1"
    assert habit["name"] == "Meditate"
    assert habit["isArchived"] is False

    second = client.post("/habits", json={"name": "Journal"}, headers=auth_headers).json()["habit"]
    assert second["id"]

    listed = client.get("/habits", headers=auth_headers).json()["habits"]
    assert [h["name"] for h in listed] == ["Meditate", "Journal"]

    patched = client.patch("/habits/h1", json={"color": "#f00"}, headers=auth_headers)
    assert patched.status_code == 200
    assert patched.json()["habit"]["color"] == "#f00"
    assert patched.json()["habit"]["name"] == "Meditate"


def test_duplicate_habit_id_is_rejected(client, auth_headers):
    client.post("/habits", json={"id": "h1", "name": "Meditate"}, headers=auth_headers)
    resp = client.post("/habits", json={"id": "h1", "name": "Again"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_blank_name_is_rejected(client, auth_headers):
    resp = client.post("/habits", json={"name": "   "}, headers=auth_headers)
    assert resp.status_code == 400

    client.post("/habits", json={"id": "h1", "name": "Meditate"}, headers=auth_headers)
    resp = client.patch("/habits/h1", json={"name": None}, headers=auth_headers)
    assert resp.status_code == 400


def test_delete_archives(client, auth_headers):
    client.post("/habits", json={"id": "h1", "name": "Meditate"}, headers=auth_headers)

    resp = client.delete("/habits/h1", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["habit"]["isArchived"] is True

    assert client.get("/habits", headers=auth_headers).json()["habits"] == []
    everything = client.get("/habits", params={"includeArchived": "true"}, headers=auth_headers).json()
    assert [h["id"] for h in everything["habits"]] == ["h1"]


def test_unknown_habit_is_not_found(client, auth_headers):
    resp = client.patch("/habits/missing", json={"name": "x"}, headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": {"code": "NOT_FOUND", "message": "Habit not found", "details": {"habit_id": "missing"}}}


def test_habits_are_isolated_per_user(client, auth_headers, other_auth_headers):
    client.post("/habits", json={"id": "h1", "name": "Mine"}, headers=auth_headers)

    assert client.get("/habits", headers=other_auth_headers).json()["habits"] == []
    assert client.patch("/habits/h1", json={"name": "Theirs"}, headers=other_auth_headers).status_code == 404
