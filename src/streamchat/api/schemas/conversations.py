"""Pydantic schemas for conversation index endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from streamchat.conversation.models import DEFAULT_TITLE


class CreateConversationRequest(BaseModel):
    """Body of ``POST /conversations``.

    Attributes:
        title: Initial title (defaults to "New chat")
        model: Model id (defaults to the configured default model)
    """

    title: Optional[str] = Field(default=DEFAULT_TITLE, max_length=10000)
    model: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("title", "model", mode="before")
    @classmethod
    def coerce_scalar_to_str(cls, value: Any) -> Any:
        """Accept numbers and booleans by their JSON text, e.g. ``123`` or ``true``."""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value


class CreateConversationResponse(BaseModel):
    """Response of ``POST /conversations``."""

    id: str


class UpdateConversationRequest(BaseModel):
    """Body of ``PATCH /conversations``.

    Attributes:
        id: Conversation to update
        title: New title, if changing
        model: New model id, if changing
    """

    id: str = Field(..., min_length=1)
    title: Optional[str] = None
    model: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
