"""Pytest configuration and shared fixtures for the test suite."""

from typing import AsyncIterator, Optional, Sequence

import pytest

from streamchat.chat.service import ConversationService
from streamchat.conversation.index import IndexService
from streamchat.conversation.store import ConversationStore
from streamchat.llm.config import LLMConfig
from streamchat.llm.gateway import Completion, CompletionOptions
from streamchat.storage.memory import InMemoryBlobStore

# Configure pytest-asyncio (asyncio_mode = "auto" in pyproject.toml)
pytest_plugins = ["pytest_asyncio"]


class StubGateway:
    """Completion gateway that replays scripted fragments without an LLM.

    Attributes:
        fragments: Fragments yielded by ``stream``
        error: Exception raised after ``fail_after`` fragments, if set
        fail_after: Number of fragments delivered before ``error`` is raised
        calls: Recorded ``(history, model, options)`` tuples
        closed: Whether the last stream was closed
    """

    def __init__(
        self,
        fragments: Sequence[str] = ("Hel", "lo"),
        error: Optional[Exception] = None,
        fail_after: Optional[int] = None,
        configured: bool = True,
    ) -> None:
        self.fragments = list(fragments)
        self.error = error
        self.fail_after = len(self.fragments) if fail_after is None else fail_after
        self.configured = configured
        self.calls: list[tuple[list[dict[str, str]], str, Optional[CompletionOptions]]] = []
        self.delivered = 0
        self.closed = False

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def stream(
        self,
        history: Sequence[dict[str, str]],
        model: str,
        options: Optional[CompletionOptions] = None,
    ) -> AsyncIterator[str]:
        self.calls.append((list(history), model, options))
        self.closed = False
        try:
            for position, fragment in enumerate(self.fragments):
                if self.error is not None and position == self.fail_after:
                    raise self.error
                self.delivered += 1
                yield fragment
            if self.error is not None and self.fail_after >= len(self.fragments):
                raise self.error
        finally:
            self.closed = True

    async def complete(
        self,
        history: Sequence[dict[str, str]],
        model: str,
        options: Optional[CompletionOptions] = None,
    ) -> Completion:
        self.calls.append((list(history), model, options))
        if self.error is not None:
            raise self.error
        return Completion(
            content="".join(self.fragments),
            model=model,
            finish_reason="stop",
            usage={"total_tokens": 7},
        )


@pytest.fixture
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    """Empty in-memory blob store."""
    return InMemoryBlobStore()


@pytest.fixture
def store(blobs: InMemoryBlobStore) -> ConversationStore:
    return ConversationStore(blobs)


@pytest.fixture
def index(blobs: InMemoryBlobStore, store: ConversationStore) -> IndexService:
    return IndexService(blobs, store)


@pytest.fixture
def llm_config() -> LLMConfig:
    """Provider config with a fake credential and the default allowlist."""
    return LLMConfig(api_key="test-key")


@pytest.fixture
def gateway() -> StubGateway:
    """Gateway emitting the fragments "Hel", "lo"."""
    return StubGateway()


@pytest.fixture
def service(
    store: ConversationStore,
    index: IndexService,
    gateway: StubGateway,
    llm_config: LLMConfig,
) -> ConversationService:
    return ConversationService(store=store, index=index, gateway=gateway, config=llm_config)


@pytest.fixture
def stub_gateway_cls() -> type[StubGateway]:
    """The StubGateway class, for tests that script their own gateway."""
    return StubGateway


async def drain(stream: AsyncIterator[str]) -> str:
    """Consume a fragment stream and return the concatenated text."""
    return "".join([fragment async for fragment in stream])


@pytest.fixture
def drain_stream():
    """Helper that consumes a fragment stream into a string."""
    return drain
