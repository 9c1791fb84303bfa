"""Integration tests for the health check endpoint."""

from fastapi.testclient import TestClient

from streamchat.api.app import create_app
from streamchat.config import Settings
from streamchat.llm.config import LLMConfig


class TestHealthEndpoint:
    def test_healthy_with_memory_storage(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["storage"]["status"] == "healthy"
        assert data["components"]["provider"]["status"] == "healthy"
        assert "version" in data

    def test_missing_credentials_is_unhealthy(self, make_client) -> None:
        client = make_client(settings=Settings(json_logs=False))

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["components"]["provider"]["message"] == "Missing OPENAI_API_KEY"

    def test_sql_storage(self, stub_gateway_cls) -> None:
        settings = Settings(
            llm=LLMConfig(api_key="test-key"),
            storage_url="sqlite+aiosqlite:///:memory:",
            json_logs=False,
        )
        app = create_app(settings=settings, gateway=stub_gateway_cls())

        with TestClient(app) as client:
            health = client.get("/health").json()
            created = client.post("/conversations", json={}).json()["id"]
            reply = client.post("/chat", json={"message": "hi", "conversationId": created})
            listing = client.get("/conversations").json()

        assert health["components"]["storage"]["message"] == "Database connection successful"
        assert reply.text == "Hello"
        assert [entry["id"] for entry in listing] == [created]
