"""Chat turn execution: validation, streaming and commit."""

from streamchat.chat.models import ConversationUpdated, TurnOutcome, TurnState
from streamchat.chat.service import ConversationService, Turn
from streamchat.chat.streaming import ABORT_MARKER, prime_stream, stream_text
from streamchat.chat.titles import infer_title

__all__ = [
    # Service
    "ConversationService",
    "Turn",
    # Models
    "ConversationUpdated",
    "TurnOutcome",
    "TurnState",
    # Streaming utilities
    "ABORT_MARKER",
    "prime_stream",
    "stream_text",
    # Titles
    "infer_title",
]
