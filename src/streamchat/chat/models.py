"""Turn state and events emitted by the conversation service."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TurnState(str, Enum):
    """Lifecycle of a single turn.

    ``IDLE -> AWAITING_COMPLETION -> STREAMING -> COMMITTED``, with
    ``ABORTED`` reachable from either in-flight state.
    """

    IDLE = "idle"
    AWAITING_COMPLETION = "awaiting_completion"
    STREAMING = "streaming"
    COMMITTED = "committed"
    ABORTED = "aborted"


class TurnOutcome(str, Enum):
    """How a turn ended, as recorded in metrics and logs."""

    COMMITTED = "committed"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ConversationUpdated:
    """Notification sent to observers after a turn commits.

    Attributes:
        conversation_id: Conversation that changed
        model: Model that produced the reply
        message_count: Number of messages in the committed log
        title: Title inferred on this turn, if any
    """

    conversation_id: str
    model: str
    message_count: int
    title: Optional[str] = None
