"""Tests for error handler middleware."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from streamchat.api.middleware.error_handler import setup_error_handlers
from streamchat.errors import ConflictError, NotFoundError, UpstreamError


class Body(BaseModel):
    id: str


class TestErrorHandlers:
    """Tests for error handler middleware."""

    @pytest.fixture
    def app(self) -> FastAPI:
        test_app = FastAPI()
        setup_error_handlers(test_app)

        @test_app.get("/not-found")
        async def not_found() -> None:
            raise NotFoundError("abc")

        @test_app.get("/conflict")
        async def conflict() -> None:
            raise ConflictError("conversations/abc.json")

        @test_app.get("/upstream")
        async def upstream() -> None:
            raise UpstreamError("bad gateway", upstream_status=503)

        @test_app.post("/body")
        async def body(payload: Body) -> dict:
            return {"id": payload.id}

        @test_app.get("/explicit")
        async def explicit() -> None:
            Body.model_validate({})

        @test_app.get("/boom")
        async def boom() -> None:
            raise RuntimeError("boom")

        return test_app

    @pytest.fixture
    def client(self, app: FastAPI) -> TestClient:
        return TestClient(app, raise_server_exceptions=False)

    def test_not_found(self, client: TestClient) -> None:
        response = client.get("/not-found")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"
        assert "abc" in response.json()["message"]

    def test_conflict(self, client: TestClient) -> None:
        response = client.get("/conflict")

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    def test_upstream_includes_provider_status(self, client: TestClient) -> None:
        response = client.get("/upstream")

        assert response.status_code == 502
        assert response.json() == {
            "code": "upstream_error",
            "message": "bad gateway",
            "upstream_status": 503,
        }

    def test_request_validation_is_400(self, client: TestClient) -> None:
        response = client.post("/body", json={})

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "invalid_input"
        assert data["errors"][0]["field"] == "body.id"

    def test_explicit_model_validation_is_400(self, client: TestClient) -> None:
        response = client.get("/explicit")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "id"

    def test_unexpected_error_is_generic_500(self, client: TestClient) -> None:
        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {
            "code": "internal_error",
            "message": "An internal server error occurred",
        }
