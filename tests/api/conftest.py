"""Shared fixtures for API route tests."""

from typing import Callable, Iterator, Optional

import pytest
from fastapi.testclient import TestClient

from streamchat.api.app import create_app
from streamchat.config import Settings
from streamchat.llm.config import LLMConfig
from streamchat.storage.base import BlobStore
from streamchat.storage.memory import InMemoryBlobStore


def make_settings(**llm_overrides) -> Settings:
    """Settings with a fake credential and console logs."""
    return Settings(llm=LLMConfig(api_key="test-key", **llm_overrides), json_logs=False)


@pytest.fixture
def make_client(
    stub_gateway_cls,
) -> Iterator[Callable[..., TestClient]]:
    """Factory building a started TestClient around a scripted gateway.

    The lifespan runs on enter, so the service container exists by the
    time the client is returned.
    """
    clients: list[TestClient] = []

    def _make(
        gateway=None,
        blobs: Optional[BlobStore] = None,
        settings: Optional[Settings] = None,
    ) -> TestClient:
        app = create_app(
            settings=settings or make_settings(),
            gateway=gateway or stub_gateway_cls(),
            blobs=blobs or InMemoryBlobStore(),
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, gateway, blobs: InMemoryBlobStore) -> TestClient:
    """Client sharing the ``gateway`` and ``blobs`` fixtures with the test."""
    return make_client(gateway=gateway, blobs=blobs)
