"""Conversation log persistence over a key-value blob store.

Each conversation log is stored as one JSON blob and replaced as a whole on
every write. Reads fail closed: missing or corrupt data yields an empty log.
"""

from typing import Optional

from pydantic import ValidationError

from streamchat.conversation.models import ConversationLog, log_adapter
from streamchat.errors import StorageCorruptError
from streamchat.observability.logging import get_logger
from streamchat.storage.base import ABSENT_ETAG, BlobStore

logger = get_logger(__name__)

KEY_PREFIX = "conversations/"
INDEX_KEY = f"{KEY_PREFIX}index.json"


def key_for(conversation_id: str) -> str:
    """Return the blob key holding a conversation's log."""
    return f"{KEY_PREFIX}{conversation_id}.json"


class ConversationStore:
    """Durable mapping from conversation id to its ordered message log.

    The store has no knowledge of the completion provider. Writes are
    whole-log replacements; by default the last writer wins. Callers that
    need compare-and-swap pass the etag returned by ``load`` to ``put``.
    """

    def __init__(self, blobs: BlobStore) -> None:
        """Initialize the store.

        Args:
            blobs: Backing blob store
        """
        self._blobs = blobs

    @property
    def supports_delete(self) -> bool:
        """Whether the backing store can delete blobs."""
        return self._blobs.supports_delete

    async def get(self, conversation_id: str) -> ConversationLog:
        """Read a conversation log.

        Args:
            conversation_id: Conversation identifier

        Returns:
            The stored log, or an empty log if missing or corrupt
        """
        log, _ = await self.load(conversation_id)
        return log

    async def load(self, conversation_id: str) -> tuple[ConversationLog, str]:
        """Read a conversation log together with its etag.

        A corrupt blob is reported with its real etag so a conditional
        write can still replace it.

        Args:
            conversation_id: Conversation identifier

        Returns:
            Tuple of (log, etag); the etag is ``ABSENT_ETAG`` if missing
        """
        key = key_for(conversation_id)
        blob = await self._blobs.get(key)
        if blob is None:
            return [], ABSENT_ETAG

        try:
            return decode_log(key, blob.data), blob.etag
        except StorageCorruptError as e:
            logger.warning("storage_corrupt", key=key, error=e.message)
            return [], blob.etag

    async def put(
        self,
        conversation_id: str,
        log: ConversationLog,
        expected_etag: Optional[str] = None,
    ) -> str:
        """Replace a conversation log.

        Args:
            conversation_id: Conversation identifier
            log: Complete log to store
            expected_etag: If given, only write when the stored etag matches

        Returns:
            Etag of the new log

        Raises:
            ConflictError: If ``expected_etag`` no longer matches
        """
        return await self._blobs.set(
            key_for(conversation_id), encode_log(log), if_match=expected_etag
        )

    async def remove(self, conversation_id: str) -> bool:
        """Delete a conversation log on a best-effort basis.

        Args:
            conversation_id: Conversation identifier

        Returns:
            True if a delete was issued, False if the backend cannot delete
        """
        if not self._blobs.supports_delete:
            logger.debug("delete_unsupported", conversation_id=conversation_id)
            return False

        try:
            await self._blobs.delete(key_for(conversation_id))
        except Exception as e:
            logger.warning(
                "log_delete_failed", conversation_id=conversation_id, error=str(e)
            )
            return False
        return True


def encode_log(log: ConversationLog) -> bytes:
    """Serialize a log to its persisted JSON form."""
    return log_adapter.dump_json(log, by_alias=True)


def decode_log(key: str, data: bytes) -> ConversationLog:
    """Parse a persisted log.

    Raises:
        StorageCorruptError: If the payload is not a valid message array
    """
    try:
        return log_adapter.validate_json(data)
    except ValidationError as e:
        raise StorageCorruptError(key, f"{e.error_count()} invalid field(s)") from e
