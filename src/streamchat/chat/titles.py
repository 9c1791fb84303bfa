"""Heuristic conversation titles.

A title is derived once, after a conversation's first turn, from the first
user message (or the assistant reply when the user message has no usable
words).
"""

import re
from typing import Optional

MAX_TITLE_WORDS = 10
MAX_TITLE_CHARS = 56
ELLIPSIS = "…"

_QUOTE_TRANSLATION = str.maketrans(
    {
        "“": '"',
        "”": '"',
        "„": '"',
        "«": '"',
        "»": '"',
        "‘": "'",
        "’": "'",
        "‚": "'",
        "`": "'",
    }
)
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Collapse whitespace, unify quote characters and strip wrapping quotes."""
    text = text.translate(_QUOTE_TRANSLATION)
    text = _WHITESPACE.sub(" ", text).strip()
    return text.strip("\"' ").strip()


def infer_title(user_text: str, assistant_text: str = "") -> Optional[str]:
    """Derive a short title for a conversation.

    Args:
        user_text: First user message
        assistant_text: First assistant reply, used as a fallback

    Returns:
        Title of at most 10 words and 56 characters (plus an ellipsis when
        shortened) with the first letter capitalized, or None if neither
        text contains any words

    Examples:
        >>> infer_title("what is the capital of France?")
        'What is the capital of France?'
    """
    source = normalize_text(user_text) or normalize_text(assistant_text)
    if not source:
        return None

    words = source.split(" ")
    truncated = len(words) > MAX_TITLE_WORDS
    title = " ".join(words[:MAX_TITLE_WORDS])

    if len(title) > MAX_TITLE_CHARS:
        title = title[:MAX_TITLE_CHARS]
        truncated = True

    if truncated:
        title = title.rstrip(" ,.;:-") + ELLIPSIS

    return title[0].upper() + title[1:]
