"""API request and response schemas."""

from streamchat.api.schemas.chat import (
    ChatRequest,
    DebugChatResponse,
    NewConversationRequest,
    SendMessageRequest,
)
from streamchat.api.schemas.conversations import (
    CreateConversationRequest,
    CreateConversationResponse,
    UpdateConversationRequest,
)

__all__ = [
    "ChatRequest",
    "DebugChatResponse",
    "NewConversationRequest",
    "SendMessageRequest",
    "CreateConversationRequest",
    "CreateConversationResponse",
    "UpdateConversationRequest",
]
