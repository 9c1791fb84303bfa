"""Completion provider gateway built on litellm.

The gateway turns a message history into either a lazily produced sequence
of text fragments or a single completed message. Provider failures are
normalized to ``UpstreamError`` with the provider status when available.
"""

import asyncio
import warnings
from typing import Any, AsyncIterator, Optional, Protocol, Sequence

import litellm
from pydantic import BaseModel

from streamchat.errors import NotConfiguredError, UpstreamError
from streamchat.llm.config import LLMConfig, supports_reasoning_effort
from streamchat.observability.logging import get_logger

# Suppress Pydantic serialization warnings from litellm
warnings.filterwarnings(
    "ignore",
    category=UserWarning,
    message=".*Pydantic serializer warnings.*",
)

logger = get_logger(__name__)

PromptMessage = dict[str, str]

_QUOTA_MARKERS = ("rate limit", "ratelimit", "quota", "too many requests", "429")


class CompletionOptions(BaseModel):
    """Per-request generation options.

    Attributes:
        reasoning_effort: Effort hint, forwarded only to reasoning models
    """

    reasoning_effort: Optional[str] = None


class Completion(BaseModel):
    """Result of a non-streaming completion.

    Attributes:
        content: Full assistant text
        model: Model that produced the reply
        finish_reason: Provider finish reason, if reported
        usage: Token usage reported by the provider
    """

    content: str
    model: str
    finish_reason: Optional[str] = None
    usage: dict[str, int] = {}


class CompletionGateway(Protocol):
    """Interface the conversation service depends on."""

    @property
    def is_configured(self) -> bool:
        """Whether credentials for the provider are present."""
        ...

    def stream(
        self,
        history: Sequence[PromptMessage],
        model: str,
        options: Optional[CompletionOptions] = None,
    ) -> AsyncIterator[str]:
        """Stream text fragments for the next assistant message.

        The sequence is finite and not restartable.

        Raises:
            UpstreamError: On transport or provider failure
        """
        ...

    async def complete(
        self,
        history: Sequence[PromptMessage],
        model: str,
        options: Optional[CompletionOptions] = None,
    ) -> Completion:
        """Produce the next assistant message in one call.

        Raises:
            UpstreamError: On transport or provider failure
        """
        ...


class LiteLLMGateway:
    """CompletionGateway backed by ``litellm.acompletion``.

    Attributes:
        config: Provider configuration
    """

    def __init__(self, config: LLMConfig) -> None:
        """Initialize the gateway.

        Args:
            config: Provider configuration
        """
        self.config = config

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    async def stream(
        self,
        history: Sequence[PromptMessage],
        model: str,
        options: Optional[CompletionOptions] = None,
    ) -> AsyncIterator[str]:
        kwargs = self._build_kwargs(history, model, options, stream=True)

        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            raise to_upstream_error(e) from e

        try:
            async for chunk in response:
                if hasattr(chunk, "choices") and len(chunk.choices) > 0:
                    delta = chunk.choices[0].delta
                    if hasattr(delta, "content") and delta.content:
                        yield delta.content
        except Exception as e:
            raise to_upstream_error(e) from e
        finally:
            # Stops the upstream request when the consumer goes away early
            close = getattr(response, "aclose", None)
            if close is not None:
                await close()

    async def complete(
        self,
        history: Sequence[PromptMessage],
        model: str,
        options: Optional[CompletionOptions] = None,
    ) -> Completion:
        kwargs = self._build_kwargs(history, model, options, stream=False)

        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            raise to_upstream_error(e) from e

        choice = response.choices[0] if response.choices else None
        usage = getattr(response, "usage", None)
        return Completion(
            content=(choice.message.content if choice else None) or "",
            model=getattr(response, "model", None) or model,
            finish_reason=getattr(choice, "finish_reason", None),
            usage={
                name: getattr(usage, name)
                for name in ("prompt_tokens", "completion_tokens", "total_tokens")
                if isinstance(getattr(usage, name, None), int)
            },
        )

    def _build_kwargs(
        self,
        history: Sequence[PromptMessage],
        model: str,
        options: Optional[CompletionOptions],
        stream: bool,
    ) -> dict[str, Any]:
        if not self.config.is_configured:
            raise NotConfiguredError("Missing OPENAI_API_KEY")

        kwargs: dict[str, Any] = {
            "model": model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in history],
            "temperature": self.config.temperature,
            "api_key": self.config.api_key,
            "timeout": self.config.timeout_seconds,
            "stream": stream,
        }
        if self.config.api_base:
            kwargs["api_base"] = self.config.api_base

        if options and options.reasoning_effort and supports_reasoning_effort(model):
            kwargs["reasoning_effort"] = options.reasoning_effort
            # Reasoning models only accept the default temperature
            kwargs.pop("temperature")

        return kwargs


def to_upstream_error(error: Exception) -> UpstreamError:
    """Normalize a provider or transport exception.

    Args:
        error: Exception raised by litellm or the transport

    Returns:
        UpstreamError carrying the provider status and quota flag
    """
    if isinstance(error, UpstreamError):
        return error

    if isinstance(error, (asyncio.TimeoutError, litellm.Timeout)):
        logger.warning("upstream_timeout", error=str(error))
        return UpstreamError("Upstream request timed out", upstream_status=504)

    status = getattr(error, "status_code", None)
    if not isinstance(status, int):
        status = None

    message = getattr(error, "message", None) or str(error) or type(error).__name__
    lowered = message.lower()
    is_quota = (
        status == 429
        or isinstance(error, litellm.RateLimitError)
        or any(marker in lowered for marker in _QUOTA_MARKERS)
    )

    logger.warning("upstream_error", status=status, is_quota=is_quota, error=message)
    return UpstreamError(message, upstream_status=status, is_quota=is_quota)
