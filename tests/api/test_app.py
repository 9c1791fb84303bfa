"""Tests for the FastAPI application factory."""

from fastapi.testclient import TestClient

from streamchat.api.dependencies import ServiceContainer


class TestCreateApp:
    def test_lifespan_builds_container(self, client: TestClient) -> None:
        container = client.app.state.container

        assert isinstance(container, ServiceContainer)
        assert container.database is None
        assert container.conversations.store is container.store

    def test_correlation_id_echoed(self, client: TestClient) -> None:
        response = client.get("/conversations", headers={"X-Correlation-ID": "req-42"})

        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_correlation_id_generated(self, client: TestClient) -> None:
        response = client.get("/conversations")

        assert len(response.headers["X-Correlation-ID"]) == 36

    def test_cors_exposes_conversation_header(self, client: TestClient) -> None:
        response = client.post(
            "/chat",
            json={"newConversation": True},
            headers={"Origin": "http://localhost:3000"},
        )

        exposed = response.headers["access-control-expose-headers"]
        assert "X-Conversation-Id" in exposed

    def test_metrics_endpoint(self, client: TestClient) -> None:
        client.post("/chat", json={"message": "hi"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "chat_turns_total" in response.text
        assert "http_requests_total" in response.text
