"""Conversation metadata index.

The index is one JSON blob holding every conversation's metadata, kept in
a separate key namespace from the logs so the full listing costs a single
read. Mutations are read-modify-write cycles guarded by the blob etag and
retried a few times when another writer interleaves.
"""

from typing import Any, Awaitable, Callable, List, Optional
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError

from streamchat.conversation.models import (
    DEFAULT_TITLE,
    ConversationMeta,
    clean_title,
    index_adapter,
    now_millis,
)
from streamchat.conversation.store import INDEX_KEY, ConversationStore
from streamchat.errors import ConflictError, NotFoundError
from streamchat.observability.logging import get_logger
from streamchat.storage.base import ABSENT_ETAG, BlobStore

logger = get_logger(__name__)

MAX_WRITE_ATTEMPTS = 3

_raw_index_adapter: TypeAdapter[List[Any]] = TypeAdapter(List[Any])

IndexMutation = Callable[[list[ConversationMeta]], list[ConversationMeta]]


class IndexService:
    """Maintains the list/rename/delete metadata for conversations.

    Attributes:
        _blobs: Blob store holding the index blob
        _store: Conversation store holding the logs
    """

    def __init__(self, blobs: BlobStore, store: ConversationStore) -> None:
        """Initialize the index service.

        Args:
            blobs: Blob store shared with the conversation store
            store: Conversation store used to create and delete logs
        """
        self._blobs = blobs
        self._store = store

    async def list_conversations(self) -> list[ConversationMeta]:
        """List all conversations, most recently active first.

        Returns:
            Metadata entries sorted by ``updated_at`` descending
        """
        entries, _ = await self._load()
        return sorted(entries, key=lambda meta: meta.updated_at, reverse=True)

    async def get(self, conversation_id: str) -> Optional[ConversationMeta]:
        """Return one index entry, or None if absent."""
        entries, _ = await self._load()
        return next((meta for meta in entries if meta.id == conversation_id), None)

    async def create(self, title: str = DEFAULT_TITLE, model: str = "") -> str:
        """Create a conversation with an empty log and an index entry.

        The log is written before the index; a failure in between leaves an
        orphan log, which is never listed.

        Args:
            title: Initial title (trimmed, at most 60 characters)
            model: Provider model identifier

        Returns:
            The new conversation id
        """
        conversation_id = str(uuid4())
        now = now_millis()
        meta = ConversationMeta(
            id=conversation_id,
            title=clean_title(title),
            model=model,
            created_at=now,
            updated_at=now,
        )

        await self._store.put(conversation_id, [])
        await self._mutate(lambda entries: [meta] + entries)

        logger.info("conversation_created", conversation_id=conversation_id, model=model)
        return conversation_id

    async def update(
        self,
        conversation_id: str,
        title: Optional[str] = None,
        model: Optional[str] = None,
    ) -> ConversationMeta:
        """Update the title and/or model of one conversation.

        Args:
            conversation_id: Conversation to update
            title: New title, if changing
            model: New model, if changing

        Returns:
            The updated entry

        Raises:
            NotFoundError: If the id is not in the index
        """
        updated: list[ConversationMeta] = []

        def apply(entries: list[ConversationMeta]) -> list[ConversationMeta]:
            changes: dict = {"updated_at": now_millis()}
            if title is not None:
                changes["title"] = clean_title(title)
            if model is not None:
                changes["model"] = model
            return _replace_entry(entries, conversation_id, changes, updated)

        await self._mutate(apply)
        logger.info(
            "conversation_updated",
            conversation_id=conversation_id,
            title_changed=title is not None,
            model_changed=model is not None,
        )
        return updated[0]

    async def rename(self, conversation_id: str, title: str) -> ConversationMeta:
        """Rename a conversation. See ``update``."""
        return await self.update(conversation_id, title=title)

    async def set_model(self, conversation_id: str, model: str) -> ConversationMeta:
        """Change the model recorded for a conversation. See ``update``."""
        return await self.update(conversation_id, model=model)

    async def touch(
        self, conversation_id: str, inferred_title: Optional[str] = None
    ) -> Optional[ConversationMeta]:
        """Bump ``updated_at`` after a turn, optionally setting a title.

        Unlike ``update``, an absent entry is not an error: conversations
        started without an index entry stay unlisted. The inferred title is
        applied only while the entry still carries the default title, checked
        inside the same guarded write so a concurrent rename always wins.

        Args:
            conversation_id: Conversation that just completed a turn
            inferred_title: Title derived from the first turn, if any

        Returns:
            The updated entry, or None if the id is not in the index
        """
        updated: list[ConversationMeta] = []

        def apply(entries: list[ConversationMeta]) -> list[ConversationMeta]:
            updated.clear()
            current = next((meta for meta in entries if meta.id == conversation_id), None)
            if current is None:
                return entries

            changes: dict = {"updated_at": now_millis()}
            if inferred_title is not None and current.title == DEFAULT_TITLE:
                changes["title"] = clean_title(inferred_title)
            return _replace_entry(entries, conversation_id, changes, updated)

        await self._mutate(apply)
        return updated[0] if updated else None

    async def delete(self, conversation_id: str) -> None:
        """Remove a conversation from the index and delete its log.

        Index removal is the authoritative signal; log deletion is best-effort
        and skipped when the backend cannot delete.

        Args:
            conversation_id: Conversation to delete
        """
        await self._mutate(
            lambda entries: [meta for meta in entries if meta.id != conversation_id]
        )
        log_deleted = await self._store.remove(conversation_id)
        logger.info(
            "conversation_deleted", conversation_id=conversation_id, log_deleted=log_deleted
        )

    async def _load(self) -> tuple[list[ConversationMeta], str]:
        blob = await self._blobs.get(INDEX_KEY)
        if blob is None:
            return [], ABSENT_ETAG

        try:
            raw_entries = _raw_index_adapter.validate_json(blob.data)
        except ValidationError as e:
            # Not a JSON array: start fresh, overwriting it on the next write
            logger.warning("storage_corrupt", key=INDEX_KEY, error_count=e.error_count())
            return [], blob.etag

        entries = []
        for position, raw in enumerate(raw_entries):
            try:
                entries.append(ConversationMeta.model_validate(raw))
            except ValidationError as e:
                # Skip only the bad entry; the rest of the index stays usable
                logger.warning(
                    "storage_corrupt",
                    key=INDEX_KEY,
                    position=position,
                    error_count=e.error_count(),
                )
        return entries, blob.etag

    async def _mutate(self, mutation: IndexMutation) -> None:
        await _with_retries(lambda: self._mutate_once(mutation))

    async def _mutate_once(self, mutation: IndexMutation) -> None:
        entries, etag = await self._load()
        result = mutation(entries)
        if result == entries:
            return
        data = index_adapter.dump_json(result, by_alias=True)
        await self._blobs.set(INDEX_KEY, data, if_match=etag)


def _replace_entry(
    entries: list[ConversationMeta],
    conversation_id: str,
    changes: dict,
    out: list[ConversationMeta],
) -> list[ConversationMeta]:
    out.clear()
    result = []
    for meta in entries:
        if meta.id == conversation_id:
            meta = meta.model_copy(update=changes)
            out.append(meta)
        result.append(meta)

    if not out:
        raise NotFoundError(conversation_id)
    return result


async def _with_retries(write: Callable[[], Awaitable[None]]) -> None:
    for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
        try:
            await write()
            return
        except ConflictError:
            if attempt == MAX_WRITE_ATTEMPTS:
                raise
            logger.debug("index_write_conflict", attempt=attempt)
