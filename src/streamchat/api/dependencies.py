"""Service wiring and FastAPI dependencies.

The blob store and the services built on it are constructed once per
process at startup and shared by all requests through ``app.state``.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from streamchat.chat.service import ConversationService
from streamchat.config import MEMORY_STORAGE_URL, Settings
from streamchat.conversation.index import IndexService
from streamchat.conversation.store import ConversationStore
from streamchat.llm.gateway import CompletionGateway, LiteLLMGateway
from streamchat.observability.logging import get_logger
from streamchat.storage.base import BlobStore
from streamchat.storage.database import Database, DatabaseConfig
from streamchat.storage.memory import InMemoryBlobStore
from streamchat.storage.sql_store import SQLBlobStore

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    """Process-wide service instances.

    Attributes:
        settings: Loaded settings
        blobs: Backing blob store
        store: Conversation log store
        index: Conversation metadata index
        conversations: Turn orchestration service
        database: SQL database, when the blob store is SQL-backed
    """

    settings: Settings
    blobs: BlobStore
    store: ConversationStore
    index: IndexService
    conversations: ConversationService
    database: Optional[Database] = None

    async def close(self) -> None:
        """Release storage connections."""
        if self.database is not None:
            await self.database.close()


async def build_container(
    settings: Settings,
    gateway: Optional[CompletionGateway] = None,
    blobs: Optional[BlobStore] = None,
) -> ServiceContainer:
    """Construct the services for one process.

    Args:
        settings: Application settings
        gateway: Completion gateway override (defaults to litellm)
        blobs: Blob store override (defaults to ``settings.storage_url``)

    Returns:
        Wired ServiceContainer
    """
    database = None
    if blobs is None:
        if settings.storage_url == MEMORY_STORAGE_URL:
            blobs = InMemoryBlobStore()
        else:
            database = Database(DatabaseConfig(url=settings.storage_url))
            await database.create_tables()
            blobs = SQLBlobStore(database)

    store = ConversationStore(blobs)
    index = IndexService(blobs, store)
    conversations = ConversationService(
        store=store,
        index=index,
        gateway=gateway or LiteLLMGateway(settings.llm),
        config=settings.llm,
        strict_writes=settings.strict_writes,
    )

    logger.info(
        "services_initialized",
        storage=type(blobs).__name__,
        supports_delete=blobs.supports_delete,
        strict_writes=settings.strict_writes,
    )
    return ServiceContainer(
        settings=settings,
        blobs=blobs,
        store=store,
        index=index,
        conversations=conversations,
        database=database,
    )


def get_container(request: Request) -> ServiceContainer:
    """Return the container attached to the application at startup."""
    return request.app.state.container


def get_conversation_service(request: Request) -> ConversationService:
    return get_container(request).conversations


def get_index_service(request: Request) -> IndexService:
    return get_container(request).index


def get_settings(request: Request) -> Settings:
    return get_container(request).settings
