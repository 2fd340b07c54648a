"""
Tests for the FastAPI command surface and its error envelope.
"""

import json

from conftest import POSTMAN_COLLECTION


def create_collection(client, collection_id, name=None, parent_id=None, is_folder=True):
    response = client.post("/api/collections", json={
        "id": collection_id,
        "name": name or collection_id,
        "parent_id": parent_id,
        "is_folder": is_folder,
    })
    assert response.status_code == 201
    return response.json()


def save_request(client, request_id, collection_id, **fields):
    body = {"id": request_id, "collection_id": collection_id, "name": request_id, **fields}
    return client.put(f"/api/requests/{request_id}", json=body)


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


class TestCollectionRoutes:

    def test_create_and_list(self, client):
        create_collection(client, "a")
        create_collection(client, "b", parent_id="a", is_folder=False)

        listed = client.get("/api/collections").json()

        assert [(c["id"], c["parent_id"], c["is_folder"]) for c in listed] == [
            ("a", None, True),
            ("b", "a", False),
        ]

    def test_unknown_parent_is_404(self, client):
        response = client.post("/api/collections", json={"id": "x", "name": "x", "parent_id": "nope"})

        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"

    def test_delete_cascades(self, client):
        create_collection(client, "root")
        create_collection(client, "child", parent_id="root")
        save_request(client, "r1", "child")

        assert client.delete("/api/collections/root").status_code == 204

        assert client.get("/api/collections").json() == []
        assert client.get("/api/requests/r1").status_code == 404

    def test_delete_unknown_is_404(self, client):
        assert client.delete("/api/collections/missing").status_code == 404

    def test_tree(self, client):
        create_collection(client, "root", name="Root")
        create_collection(client, "box", parent_id="root", is_folder=False)
        save_request(client, "r1", "box", name="Login")

        tree = client.get("/api/collections/tree").json()

        assert tree[0]["type"] == "folder"
        assert tree[0]["label"] == "Root"
        assert [(c["type"], c["label"]) for c in tree[0]["children"]] == [("request", "Login")]

    def test_export(self, client):
        create_collection(client, "root", name="Root")
        save_request(client, "r1", "root", name="Ping", headers='[{"key": "A", "value": "1"}]')

        response = client.get("/api/collections/root/export")

        assert response.status_code == 200
        document = json.loads(response.text)
        assert document == {
            "name": "Root",
            "requests": [{
                "name": "Ping",
                "method": "GET",
                "url": "",
                "headers": [{"key": "A", "value": "1"}],
                "body": "",
                "body_type": "none",
                "auth_type": "none",
                "auth_data": {},
            }],
            "folders": [],
        }


class TestRequestRoutes:

    def test_upsert_and_get(self, client):
        create_collection(client, "c")

        created = save_request(client, "r1", "c", method="POST", url="https://x.io")
        updated = save_request(client, "r1", "c", method="PUT", url="https://x.io")

        assert created.status_code == 200
        assert updated.json()["method"] == "PUT"
        assert updated.json()["created_at"] == created.json()["created_at"]
        assert [r["id"] for r in client.get("/api/collections/c/requests").json()] == ["r1"]

    def test_path_id_wins(self, client):
        create_collection(client, "c")

        response = client.put("/api/requests/real", json={"id": "other", "collection_id": "c", "name": "n"})

        assert response.json()["id"] == "real"

    def test_missing_collection_is_404(self, client):
        assert save_request(client, "r1", "nope").status_code == 404

    def test_invalid_body_type_is_422(self, client):
        create_collection(client, "c")

        response = save_request(client, "r1", "c", body_type="xml")

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert "body_type" in response.json()["detail"]

    def test_delete(self, client):
        create_collection(client, "c")
        save_request(client, "r1", "c")

        assert client.delete("/api/requests/r1").status_code == 204
        assert client.delete("/api/requests/r1").status_code == 404


class TestExecuteRoutes:

    def test_execute_draft(self, client):
        response = client.post("/api/execute", json={
            "method": "POST",
            "url": "https://echo.example.com/items",
            "headers": [{"key": "X-One", "value": "1"}, {"key": "X-Off", "value": "0", "enabled": False}],
            "body": '{"a": 1}',
            "body_type": "json",
        })

        assert response.status_code == 200
        payload = response.json()
        echoed = json.loads(payload["body"])
        assert echoed["method"] == "POST"
        assert echoed["headers"]["x-one"] == "1"
        assert "x-off" not in echoed["headers"]
        assert echoed["headers"]["content-type"] == "application/json"
        assert echoed["body"] == '{"a": 1}'
        assert payload["cookies"] == [{"name": "session", "value": "abc", "domain": "example.com", "path": "/"}]
        assert payload["size"] == len(payload["body"].encode())

    def test_invalid_url_is_400(self, client):
        response = client.post("/api/execute", json={"url": "http://example.com:notaport/"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "BAD_REQUEST"

    def test_interpolate_uses_active_environment(self, client):
        client.put("/api/environments/e1", json={
            "id": "e1", "name": "Dev", "is_active": True,
            "variables": '[{"key": "host", "value": "api.dev"}]',
        })

        response = client.post("/api/execute/interpolate", json={"text": "https://{{host}}/{{missing}}"})

        assert response.json() == {"result": "https://api.dev/{{missing}}"}


class TestEnvironmentRoutes:

    def test_activation_is_exclusive(self, client):
        client.put("/api/environments/a", json={"id": "a", "name": "A", "is_active": True})
        client.put("/api/environments/b", json={"id": "b", "name": "B", "is_active": True})

        listed = client.get("/api/environments").json()

        assert [(e["id"], e["is_active"]) for e in listed] == [("a", False), ("b", True)]
        assert client.get("/api/environments/active").json()["id"] == "b"

    def test_no_active_environment_is_null(self, client):
        assert client.get("/api/environments/active").json() is None

    def test_delete(self, client):
        client.put("/api/environments/a", json={"id": "a", "name": "A"})

        assert client.delete("/api/environments/a").status_code == 204
        assert client.delete("/api/environments/a").status_code == 404


class TestHistoryRoutes:

    def test_add_list_clear(self, client):
        for i, status in enumerate((200, 500)):
            response = client.post("/api/history", json={
                "id": f"h{i}", "method": "GET", "url": "{{host}}/x", "status": status, "response_time": 3,
            })
            assert response.status_code == 201

        assert [h["id"] for h in client.get("/api/history").json()] == ["h1", "h0"]
        assert [h["id"] for h in client.get("/api/history", params={"limit": 1}).json()] == ["h1"]

        assert client.delete("/api/history").status_code == 204
        assert client.get("/api/history").json() == []


class TestImportRoutes:

    def test_parse_then_save(self, client):
        parsed = client.post("/api/import/postman", json={"json_content": json.dumps(POSTMAN_COLLECTION)})
        assert parsed.status_code == 200

        saved = client.post("/api/import", json=parsed.json())

        assert saved.status_code == 201
        root_id = saved.json()["root_id"]
        names = {c["name"]: c for c in client.get("/api/collections").json()}
        assert names["Shop API"]["id"] == root_id

    def test_invalid_document_is_400(self, client):
        response = client.post("/api/import/postman", json={"json_content": "{}"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "IMPORT_ERROR"
