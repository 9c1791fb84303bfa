"""Plain-text streaming utilities for chat replies.

Fragments are forwarded to the transport as UTF-8 byte chunks in arrival
order. A failure after the response has started cannot change the HTTP
status, so the stream is terminated with an abort marker instead.
"""

from typing import AsyncIterator, Awaitable, Callable, Optional

from streamchat.errors import ChatError
from streamchat.observability.logging import get_logger

logger = get_logger(__name__)

ABORT_MARKER = "\n[stream aborted]\n"

DisconnectProbe = Callable[[], Awaitable[bool]]


async def _aclose(stream: AsyncIterator[str]) -> None:
    close = getattr(stream, "aclose", None)
    if close is not None:
        await close()


async def prime_stream(stream: AsyncIterator[str]) -> AsyncIterator[str]:
    """Pull the first fragment eagerly.

    Errors raised before the first fragment (rejected credentials, quota,
    unknown model) surface to the caller while a proper error response can
    still be sent.

    Args:
        stream: Fragment stream that has not been started

    Returns:
        A stream yielding the pulled fragment followed by the rest

    Raises:
        Exception: Whatever the stream raised before its first fragment
    """
    iterator = stream.__aiter__()
    try:
        first = await iterator.__anext__()
    except StopAsyncIteration:
        return _empty()

    return _chain(first, iterator)


async def _empty() -> AsyncIterator[str]:
    return
    yield  # pragma: no cover


async def _chain(first: str, rest: AsyncIterator[str]) -> AsyncIterator[str]:
    try:
        yield first
        async for fragment in rest:
            yield fragment
    finally:
        await _aclose(rest)


async def stream_text(
    stream: AsyncIterator[str],
    is_disconnected: Optional[DisconnectProbe] = None,
) -> AsyncIterator[bytes]:
    """Encode fragments for a ``text/plain`` streaming response.

    The source stream is always closed when this generator finishes, which
    cancels the upstream request if the client went away early.

    Args:
        stream: Fragment stream
        is_disconnected: Optional probe for client disconnection

    Yields:
        UTF-8 encoded fragments, then ``ABORT_MARKER`` if the source failed
    """
    try:
        async for fragment in stream:
            if is_disconnected is not None and await is_disconnected():
                logger.info("client_disconnected")
                break
            if fragment:
                yield fragment.encode("utf-8")
    except ChatError as e:
        logger.warning("stream_aborted", code=e.code, error=e.message)
        yield ABORT_MARKER.encode("utf-8")
    except Exception as e:
        logger.error("stream_aborted", code="internal_error", error=str(e), exc_info=True)
        yield ABORT_MARKER.encode("utf-8")
    finally:
        await _aclose(stream)
