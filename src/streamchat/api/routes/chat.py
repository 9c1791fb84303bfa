"""Chat API route handlers.

``POST /chat`` either resets a conversation or sends a message and streams
the assistant reply as plain text. The conversation id travels in the
``X-Conversation-Id`` response header.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import TypeAdapter

from streamchat.api.dependencies import get_conversation_service
from streamchat.api.schemas.chat import (
    ChatRequest,
    DebugChatResponse,
    NewConversationRequest,
    SendMessageRequest,
)
from streamchat.chat.service import ConversationService
from streamchat.chat.streaming import prime_stream, stream_text
from streamchat.errors import InvalidInputError, UpstreamError
from streamchat.llm.gateway import CompletionOptions

router = APIRouter(tags=["chat"])

CONVERSATION_ID_HEADER = "X-Conversation-Id"

_chat_request_adapter: TypeAdapter[ChatRequest] = TypeAdapter(ChatRequest)


async def parse_json_body(request: Request) -> Any:
    """Decode the request body as JSON.

    Raises:
        InvalidInputError: If the body is not valid JSON
    """
    try:
        return await request.json()
    except ValueError as e:
        raise InvalidInputError("Request body must be valid JSON") from e


@router.api_route("/chat", methods=["GET", "POST"], response_model=None)
async def chat(
    request: Request,
    ping: Optional[str] = Query(None),
    debug: Optional[str] = Query(None),
    service: ConversationService = Depends(get_conversation_service),
) -> Response:
    """Reset a conversation or stream a reply to a user message.

    Args:
        request: FastAPI Request for body access and disconnect detection
        ping: ``1`` answers ``OK`` without touching the provider or storage
        debug: ``1`` returns the whole reply as JSON instead of streaming
        service: Conversation service

    Returns:
        ``OK`` for resets, a ``text/plain`` stream for messages, or JSON
        for the debug path

    Raises:
        NotConfiguredError: If provider credentials are missing (500)
        InvalidInputError: If the body is malformed (400)
        UpstreamError: If the provider rejects the request before the first
            fragment (502, or 429 for quota)

    Example stream::

        POST /chat {"message": "hi", "conversationId": "..."}
        200 X-Conversation-Id: ...
        Hello! How can I help?
    """
    if ping == "1":
        return PlainTextResponse("OK")

    if request.method != "POST":
        return PlainTextResponse("Method Not Allowed", status_code=405)

    service.require_configured()

    body = _chat_request_adapter.validate_python(await parse_json_body(request))

    if isinstance(body, NewConversationRequest):
        conversation_id = await service.new_conversation(body.conversation_id, body.model)
        return PlainTextResponse("OK", headers={CONVERSATION_ID_HEADER: conversation_id})

    assert isinstance(body, SendMessageRequest)
    options = CompletionOptions(reasoning_effort=body.reasoning_effort)

    if debug == "1":
        return await _complete_without_streaming(service, body, options)

    turn = await service.send_message(body.conversation_id, body.message, body.model, options)
    fragments = await prime_stream(turn.stream())

    return StreamingResponse(
        stream_text(fragments, request.is_disconnected),
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            CONVERSATION_ID_HEADER: turn.conversation_id,
        },
    )


async def _complete_without_streaming(
    service: ConversationService,
    body: SendMessageRequest,
    options: CompletionOptions,
) -> JSONResponse:
    try:
        conversation_id, completion = await service.complete_message(
            body.conversation_id, body.message, body.model, options
        )
    except UpstreamError as e:
        status = e.upstream_status or e.status_code
        return JSONResponse(
            status_code=status,
            content={"error": "upstream", "status": status, "message": e.message},
        )

    response = DebugChatResponse(
        reply=completion.content,
        conversation_id=conversation_id,
        status={
            "model": completion.model,
            "finish_reason": completion.finish_reason,
            **completion.usage,
        },
    )
    return JSONResponse(
        content=response.model_dump(by_alias=True),
        headers={CONVERSATION_ID_HEADER: conversation_id},
    )
