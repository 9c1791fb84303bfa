"""Conversation index route handlers.

List, create, rename/re-model and delete conversations. All handlers
operate on the metadata index; creation and deletion also touch the log.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from streamchat.api.dependencies import get_index_service, get_settings
from streamchat.api.schemas.conversations import (
    CreateConversationRequest,
    CreateConversationResponse,
    UpdateConversationRequest,
)
from streamchat.config import Settings
from streamchat.conversation.index import IndexService
from streamchat.errors import InvalidInputError
from streamchat.llm.config import is_valid_model_id

router = APIRouter(prefix="/conversations", tags=["conversations"])


def _check_model(model: str) -> str:
    model = model.strip()
    if not is_valid_model_id(model):
        raise InvalidInputError(f"Invalid model identifier: {model!r}", code="invalid_model")
    return model


@router.get("")
async def list_conversations(
    index: IndexService = Depends(get_index_service),
) -> JSONResponse:
    """List conversations, most recently active first.

    Example:
        >>> GET /conversations
        >>> [{"id": "...", "title": "New chat", "model": "gpt-4o-mini",
        ...   "createdAt": 1717000000000, "updatedAt": 1717000000000}]
    """
    entries = await index.list_conversations()
    return JSONResponse(content=[meta.model_dump(by_alias=True) for meta in entries])


@router.post("", response_model=CreateConversationResponse)
async def create_conversation(
    request: Request,
    index: IndexService = Depends(get_index_service),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Create a conversation with an empty log.

    A missing or unparsable body is treated as ``{}``.
    """
    try:
        raw = await request.json()
    except ValueError:
        raw = {}
    body = CreateConversationRequest.model_validate(raw if isinstance(raw, dict) else {})

    model = _check_model(body.model) if body.model else settings.llm.default_model
    conversation_id = await index.create(title=body.title or "", model=model)

    return JSONResponse(
        content=CreateConversationResponse(id=conversation_id).model_dump(),
        headers={"X-Conversation-Id": conversation_id},
    )


@router.patch("")
async def update_conversation(
    body: UpdateConversationRequest,
    index: IndexService = Depends(get_index_service),
) -> JSONResponse:
    """Rename a conversation and/or change its model.

    Raises:
        InvalidInputError: If neither field is given (400)
        NotFoundError: If the id is not in the index (404)
    """
    if body.title is None and body.model is None:
        raise InvalidInputError("Nothing to update: provide title and/or model")

    model = _check_model(body.model) if body.model is not None else None
    meta = await index.update(body.id, title=body.title, model=model)
    return JSONResponse(content=meta.model_dump(by_alias=True))


@router.delete("")
async def delete_conversation(
    conversation_id: Optional[str] = Query(None, alias="id"),
    index: IndexService = Depends(get_index_service),
) -> PlainTextResponse:
    """Delete a conversation and, where supported, its log.

    Raises:
        InvalidInputError: If ``id`` is missing (400)
    """
    if not conversation_id or not conversation_id.strip():
        raise InvalidInputError("id required")

    await index.delete(conversation_id.strip())
    return PlainTextResponse("OK")
