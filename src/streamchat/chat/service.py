"""Conversation service orchestrating chat turns.

This module provides the ConversationService, which validates a user
message, loads the conversation log, forwards the full history to the
completion gateway, streams fragments back to the caller and commits the
finished turn as one whole-log replacement.
"""

import asyncio
import time
from typing import AsyncIterator, Awaitable, Callable, Optional
from uuid import uuid4

from streamchat.chat.models import ConversationUpdated, TurnOutcome, TurnState
from streamchat.chat.titles import infer_title
from streamchat.conversation.index import IndexService
from streamchat.conversation.models import (
    ConversationLog,
    Message,
    MessageRole,
    clean_title,
)
from streamchat.conversation.store import ConversationStore
from streamchat.errors import InvalidInputError, NotConfiguredError, UpstreamError
from streamchat.llm.config import LLMConfig, REASONING_EFFORTS
from streamchat.llm.gateway import Completion, CompletionGateway, CompletionOptions
from streamchat.observability.logging import get_logger
from streamchat.observability.metrics import get_metrics_collector

logger = get_logger(__name__)

UpdateListener = Callable[[ConversationUpdated], Awaitable[None]]


class Turn:
    """One in-flight turn: the loaded log plus the new user message.

    Created by ``ConversationService.send_message``. Iterating ``stream()``
    drives the turn through its states; the log is written only once the
    gateway sequence is fully drained.

    Attributes:
        conversation_id: Conversation the turn belongs to
        model: Model the turn is sent to
        history: Loaded log with the new user message appended
        state: Current TurnState
    """

    def __init__(
        self,
        service: "ConversationService",
        conversation_id: str,
        model: str,
        history: ConversationLog,
        etag: str,
        options: CompletionOptions,
    ) -> None:
        self._service = service
        self.conversation_id = conversation_id
        self.model = model
        self.history = history
        self.options = options
        self.state = TurnState.IDLE
        self._etag = etag
        self._fragments: list[str] = []
        self._started_at = time.monotonic()

    @property
    def is_first_turn(self) -> bool:
        """Whether the log was empty before this turn."""
        return len(self.history) == 1

    @property
    def content(self) -> str:
        """Assistant text received so far."""
        return "".join(self._fragments)

    def prompt(self) -> list[dict[str, str]]:
        """History projected to ``{role, content}`` pairs, timestamps stripped."""
        return [message.to_prompt() for message in self.history]

    async def stream(self) -> AsyncIterator[str]:
        """Stream assistant fragments and commit the turn when exhausted.

        Yields:
            Text fragments in arrival order

        Raises:
            UpstreamError: If the provider fails; nothing is committed
            ConflictError: If strict writes are enabled and another writer won
        """
        if self.state is not TurnState.IDLE:
            raise RuntimeError("A turn can only be streamed once")

        gateway = self._service.gateway
        self.state = TurnState.AWAITING_COMPLETION
        upstream = gateway.stream(self.prompt(), self.model, self.options)

        try:
            async for fragment in upstream:
                self.state = TurnState.STREAMING
                self._fragments.append(fragment)
                yield fragment
        except UpstreamError as e:
            self._abort(TurnOutcome.ABORTED, error=e.message)
            get_metrics_collector().record_upstream_error(e.upstream_status)
            raise
        except (GeneratorExit, asyncio.CancelledError):
            # Client went away: stop pulling from the provider, commit nothing
            self._abort(TurnOutcome.CANCELLED)
            raise
        except Exception as e:
            self._abort(TurnOutcome.ABORTED, error=str(e))
            raise
        finally:
            close = getattr(upstream, "aclose", None)
            if close is not None:
                await close()

        await self._service._commit(self, self.content)

    def _abort(self, outcome: TurnOutcome, error: Optional[str] = None) -> None:
        self.state = TurnState.ABORTED
        logger.warning(
            "turn_aborted" if outcome is TurnOutcome.ABORTED else "stream_cancelled",
            conversation_id=self.conversation_id,
            fragments=len(self._fragments),
            error=error,
        )
        self._service._record(self, outcome)


class ConversationService:
    """Executes chat turns against a conversation store and a gateway.

    Attributes:
        store: Conversation log storage
        index: Conversation metadata index
        gateway: Completion provider gateway
        config: Provider configuration (default model, allowlist)
        strict_writes: Commit with compare-and-swap instead of last-writer-wins
    """

    def __init__(
        self,
        store: ConversationStore,
        index: IndexService,
        gateway: CompletionGateway,
        config: LLMConfig,
        strict_writes: bool = False,
    ) -> None:
        """Initialize the conversation service.

        Args:
            store: Conversation log storage
            index: Conversation metadata index
            gateway: Completion provider gateway
            config: Provider configuration
            strict_writes: Reject a commit with ConflictError if the log
                changed since it was loaded
        """
        self.store = store
        self.index = index
        self.gateway = gateway
        self.config = config
        self.strict_writes = strict_writes
        self._listeners: list[UpdateListener] = []

    def subscribe(self, listener: UpdateListener) -> None:
        """Register a callback invoked after every committed turn."""
        self._listeners.append(listener)

    async def new_conversation(
        self, conversation_id: Optional[str] = None, model: Optional[str] = None
    ) -> str:
        """Reset a conversation to an empty log, creating an id if needed.

        Calling it repeatedly is harmless; the log is empty afterwards. The
        model is checked the same way as for a message.

        Args:
            conversation_id: Conversation to reset; a fresh id if blank
            model: Model the client intends to use; the default if blank

        Returns:
            The conversation id

        Raises:
            InvalidInputError: If the model is not allowed
        """
        self.resolve_model(model)
        conversation_id = self.resolve_conversation_id(conversation_id)
        await self.store.put(conversation_id, [])
        logger.info("conversation_reset", conversation_id=conversation_id)
        return conversation_id

    async def send_message(
        self,
        conversation_id: Optional[str],
        text: Optional[str],
        model: Optional[str] = None,
        options: Optional[CompletionOptions] = None,
    ) -> Turn:
        """Validate a message and prepare a turn for streaming.

        Configuration and input are checked before any storage access. The
        returned turn holds the loaded log with the user message appended in
        memory; nothing is written until its stream is drained.

        Args:
            conversation_id: Target conversation; a fresh id if blank
            text: User message
            model: Model id; the configured default if blank
            options: Generation options such as a reasoning effort

        Returns:
            A Turn ready to be streamed

        Raises:
            NotConfiguredError: If provider credentials are missing
            InvalidInputError: If the message, model or options are invalid
        """
        self.require_configured()
        content = self.validate_message(text)
        model = self.resolve_model(model)
        options = self.validate_options(options)
        conversation_id = self.resolve_conversation_id(conversation_id)

        log, etag = await self.store.load(conversation_id)
        history = log + [Message(role=MessageRole.USER, content=content)]

        logger.info(
            "turn_started",
            conversation_id=conversation_id,
            model=model,
            history_length=len(history),
        )
        return Turn(self, conversation_id, model, history, etag, options)

    async def complete_message(
        self,
        conversation_id: Optional[str],
        text: Optional[str],
        model: Optional[str] = None,
        options: Optional[CompletionOptions] = None,
    ) -> tuple[str, Completion]:
        """Run a whole turn without streaming and commit it.

        Args:
            conversation_id: Target conversation; a fresh id if blank
            text: User message
            model: Model id; the configured default if blank
            options: Generation options

        Returns:
            Tuple of (conversation id, provider completion)

        Raises:
            NotConfiguredError: If provider credentials are missing
            InvalidInputError: If the message, model or options are invalid
            UpstreamError: If the provider fails; nothing is committed
        """
        turn = await self.send_message(conversation_id, text, model, options)
        turn.state = TurnState.AWAITING_COMPLETION
        try:
            completion = await self.gateway.complete(turn.prompt(), turn.model, turn.options)
        except UpstreamError as e:
            turn._abort(TurnOutcome.ABORTED, error=e.message)
            get_metrics_collector().record_upstream_error(e.upstream_status)
            raise

        await self._commit(turn, completion.content)
        return turn.conversation_id, completion

    def validate_message(self, text: Optional[str]) -> str:
        """Return the trimmed message or raise InvalidInputError."""
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Message is required")
        return text.strip()

    def resolve_model(self, model: Optional[str]) -> str:
        """Apply the default model, then the syntax and allowlist checks."""
        chosen = model.strip() if isinstance(model, str) and model.strip() else None
        chosen = chosen or self.config.default_model
        if not self.config.is_model_allowed(chosen):
            raise InvalidInputError(f"Model not allowed: {chosen}", code="invalid_model")
        return chosen

    def validate_options(self, options: Optional[CompletionOptions]) -> CompletionOptions:
        options = options or CompletionOptions()
        effort = options.reasoning_effort
        if effort is not None and effort not in REASONING_EFFORTS:
            raise InvalidInputError(
                f"reasoning_effort must be one of {', '.join(REASONING_EFFORTS)}"
            )
        return options

    @staticmethod
    def resolve_conversation_id(conversation_id: Optional[str]) -> str:
        if isinstance(conversation_id, str) and conversation_id.strip():
            return conversation_id.strip()
        return str(uuid4())

    def require_configured(self) -> None:
        """Raise NotConfiguredError if the gateway has no credentials."""
        if not self.gateway.is_configured:
            logger.error("provider_not_configured")
            raise NotConfiguredError("Missing OPENAI_API_KEY")

    async def _commit(self, turn: Turn, content: str) -> None:
        log = turn.history + [Message(role=MessageRole.ASSISTANT, content=content)]
        expected = turn._etag if self.strict_writes else None

        try:
            await self.store.put(turn.conversation_id, log, expected_etag=expected)
        except Exception:
            turn._abort(TurnOutcome.ABORTED, error="commit failed")
            raise

        turn.state = TurnState.COMMITTED
        self._record(turn, TurnOutcome.COMMITTED)
        logger.info(
            "turn_committed",
            conversation_id=turn.conversation_id,
            message_count=len(log),
            reply_length=len(content),
        )
        await self._after_commit(turn, log, content)

    async def _after_commit(self, turn: Turn, log: ConversationLog, content: str) -> None:
        title = None
        try:
            inferred = (
                infer_title(turn.history[0].content, content) if turn.is_first_turn else None
            )
            meta = await self.index.touch(turn.conversation_id, inferred_title=inferred)
            if inferred and meta is not None and meta.title == clean_title(inferred):
                title = meta.title
                logger.info("title_inferred", conversation_id=turn.conversation_id, title=title)
        except Exception as e:
            # The turn is already durable; the index catches up on the next turn
            logger.warning(
                "index_update_failed", conversation_id=turn.conversation_id, error=str(e)
            )

        event = ConversationUpdated(
            conversation_id=turn.conversation_id,
            model=turn.model,
            message_count=len(log),
            title=title,
        )
        for listener in self._listeners:
            try:
                await listener(event)
            except Exception as e:
                logger.warning("update_listener_failed", error=str(e))

    def _record(self, turn: Turn, outcome: TurnOutcome) -> None:
        get_metrics_collector().record_turn(
            outcome=outcome.value,
            model=turn.model,
            duration_seconds=time.monotonic() - turn._started_at,
        )
