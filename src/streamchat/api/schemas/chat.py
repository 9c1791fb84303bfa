"""Pydantic schemas for the chat endpoint.

The request body is a tagged variant: ``newConversation: true`` selects the
reset operation, anything else is a message send.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _ChatBody(BaseModel):
    conversation_id: Optional[str] = Field(
        default=None, alias="conversationId", max_length=200
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class NewConversationRequest(_ChatBody):
    """Reset (or create) a conversation's log.

    Attributes:
        new_conversation: Always true for this variant
        conversation_id: Conversation to reset; a fresh id if omitted
        model: Model the client has selected; checked like a message's
    """

    new_conversation: Literal[True] = Field(alias="newConversation")
    model: Optional[str] = None


class SendMessageRequest(_ChatBody):
    """Send a user message and stream the assistant reply.

    Attributes:
        message: User's message; validated as non-blank by the service
        conversation_id: Conversation to continue; a fresh id if omitted
        model: Provider model id; the configured default if omitted
        reasoning_effort: Optional effort hint for reasoning models
    """

    new_conversation: Literal[False] = Field(default=False, alias="newConversation")
    message: Optional[str] = None
    model: Optional[str] = None
    reasoning_effort: Optional[str] = None


ChatRequest = Union[NewConversationRequest, SendMessageRequest]


class DebugChatResponse(BaseModel):
    """Body returned by the non-streaming debug path."""

    reply: str
    conversation_id: str = Field(alias="conversationId")
    status: dict[str, Optional[Union[str, int]]] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)
