"""Conversation domain models.

Provides core data models for conversation logs and index metadata using
Pydantic for validation and serialization. Field aliases match the persisted
JSON layout (``ts``, ``createdAt``, ``updatedAt``).
"""

import time
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

TITLE_MAX_LENGTH = 60
DEFAULT_TITLE = "New chat"


def now_millis() -> int:
    """Return the current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


class MessageRole(str, Enum):
    """Role of a message sender in a conversation."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single message within a conversation log.

    Messages are immutable once appended; the log only ever grows by
    appending a user message and then an assistant message.

    Attributes:
        role: Who sent the message (user or assistant)
        content: UTF-8 message text, unbounded length
        timestamp: Epoch milliseconds when the message was appended
    """

    role: MessageRole
    content: str
    timestamp: int = Field(default_factory=now_millis, alias="ts")

    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=True)

    def to_prompt(self) -> dict[str, str]:
        """Project the message to the ``{role, content}`` pair sent upstream."""
        return {"role": str(self.role), "content": self.content}


class ConversationMeta(BaseModel):
    """Index entry describing one conversation.

    Attributes:
        id: Conversation identifier
        title: Human-readable title (at most 60 characters)
        model: Provider model identifier
        created_at: Epoch milliseconds at creation
        updated_at: Epoch milliseconds of the last activity
    """

    id: str
    title: str = Field(default=DEFAULT_TITLE, max_length=TITLE_MAX_LENGTH)
    model: str
    created_at: int = Field(default_factory=now_millis, alias="createdAt")
    updated_at: int = Field(default_factory=now_millis, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)


ConversationLog = List[Message]

log_adapter: TypeAdapter[List[Message]] = TypeAdapter(List[Message])
index_adapter: TypeAdapter[List[ConversationMeta]] = TypeAdapter(List[ConversationMeta])


def clean_title(title: str) -> str:
    """Trim a user-supplied title and cap it at the stored maximum.

    Empty titles fall back to the default title.
    """
    title = title.strip()[:TITLE_MAX_LENGTH].strip()
    return title or DEFAULT_TITLE
