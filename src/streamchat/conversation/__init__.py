"""Conversation logs, metadata index and their persistence."""

from streamchat.conversation.index import IndexService
from streamchat.conversation.models import (
    ConversationLog,
    ConversationMeta,
    Message,
    MessageRole,
)
from streamchat.conversation.store import INDEX_KEY, ConversationStore, key_for

__all__ = [
    "ConversationLog",
    "ConversationMeta",
    "Message",
    "MessageRole",
    "ConversationStore",
    "IndexService",
    "INDEX_KEY",
    "key_for",
]
