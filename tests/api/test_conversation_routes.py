"""Tests for the /conversations endpoints."""

from itertools import count
from unittest.mock import patch

from fastapi.testclient import TestClient

from streamchat.storage.memory import WriteOnceBlobStore


class TestCreateConversation:
    def test_create_then_list(self, client: TestClient) -> None:
        response = client.post("/conversations", json={"title": "New chat", "model": "gpt-4o-mini"})

        assert response.status_code == 200
        conversation_id = response.json()["id"]
        assert response.headers["X-Conversation-Id"] == conversation_id

        [entry] = client.get("/conversations").json()
        assert entry["id"] == conversation_id
        assert entry["title"] == "New chat"
        assert entry["model"] == "gpt-4o-mini"
        assert entry["createdAt"] == entry["updatedAt"]

    def test_missing_body_uses_defaults(self, client: TestClient) -> None:
        client.post("/conversations")

        [entry] = client.get("/conversations").json()
        assert entry["title"] == "New chat"
        assert entry["model"] == "gpt-4o-mini"

    def test_long_title_is_capped(self, client: TestClient) -> None:
        client.post("/conversations", json={"title": "t" * 80})

        [entry] = client.get("/conversations").json()
        assert entry["title"] == "t" * 60

    def test_scalar_title_is_stored_as_text(self, client: TestClient) -> None:
        response = client.post("/conversations", json={"title": 123})

        assert response.status_code == 200
        assert client.get("/conversations").json()[0]["title"] == "123"

    def test_malformed_model_is_400(self, client: TestClient) -> None:
        response = client.post("/conversations", json={"model": "not a model"})

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_model"

    def test_newest_first(self, client: TestClient) -> None:
        with patch("streamchat.conversation.index.now_millis", side_effect=count(1000)):
            first = client.post("/conversations", json={}).json()["id"]
            second = client.post("/conversations", json={}).json()["id"]
            client.post("/chat", json={"message": "hi", "conversationId": first})

        ids = [entry["id"] for entry in client.get("/conversations").json()]

        assert ids == [first, second]


class TestUpdateConversation:
    def test_rename(self, client: TestClient) -> None:
        conversation_id = client.post("/conversations", json={}).json()["id"]

        response = client.patch("/conversations", json={"id": conversation_id, "title": "Trip"})

        assert response.status_code == 200
        assert response.json()["title"] == "Trip"
        assert client.get("/conversations").json()[0]["title"] == "Trip"

    def test_set_model(self, client: TestClient) -> None:
        conversation_id = client.post("/conversations", json={}).json()["id"]

        response = client.patch("/conversations", json={"id": conversation_id, "model": "gpt-4o"})

        assert response.json()["model"] == "gpt-4o"
        assert response.json()["title"] == "New chat"

    def test_unknown_id_is_404(self, client: TestClient) -> None:
        response = client.patch("/conversations", json={"id": "unknown", "title": "x"})

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_nothing_to_update_is_400(self, client: TestClient) -> None:
        conversation_id = client.post("/conversations", json={}).json()["id"]

        response = client.patch("/conversations", json={"id": conversation_id})

        assert response.status_code == 400

    def test_missing_id_is_400(self, client: TestClient) -> None:
        response = client.patch("/conversations", json={"title": "x"})

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"


class TestDeleteConversation:
    def test_delete(self, client: TestClient) -> None:
        conversation_id = client.post("/conversations", json={}).json()["id"]

        response = client.delete("/conversations", params={"id": conversation_id})

        assert response.status_code == 200
        assert response.text == "OK"
        assert client.get("/conversations").json() == []

    def test_missing_id_is_400(self, client: TestClient) -> None:
        assert client.delete("/conversations").status_code == 400

    def test_delete_without_blob_deletion(self, make_client) -> None:
        client = make_client(blobs=WriteOnceBlobStore())
        conversation_id = client.post("/conversations", json={}).json()["id"]

        response = client.delete("/conversations", params={"id": conversation_id})

        assert response.status_code == 200
        assert client.get("/conversations").json() == []
