"""Tests for conversation title inference."""

import pytest

from streamchat.chat.titles import ELLIPSIS, MAX_TITLE_CHARS, infer_title, normalize_text


class TestNormalizeText:
    def test_collapses_whitespace(self) -> None:
        assert normalize_text("  hello \n\t world  ") == "hello world"

    def test_unifies_and_strips_wrapping_quotes(self) -> None:
        assert normalize_text("“Plan a ‘quick’ trip”") == "Plan a 'quick' trip"


class TestInferTitle:
    def test_short_question_is_kept_and_capitalized(self) -> None:
        assert infer_title("what is the capital of France?", "Paris.") == (
            "What is the capital of France?"
        )

    def test_caps_at_ten_words(self) -> None:
        title = infer_title("one two three four five six seven eight nine ten eleven twelve")

        assert title == "One two three four five six seven eight nine ten" + ELLIPSIS

    def test_caps_at_character_limit(self) -> None:
        title = infer_title("supercalifragilistic " * 3)

        assert title.endswith(ELLIPSIS)
        assert len(title) <= MAX_TITLE_CHARS + len(ELLIPSIS)

    def test_falls_back_to_assistant_reply(self) -> None:
        assert infer_title("   ", "sure, here is a haiku") == "Sure, here is a haiku"

    @pytest.mark.parametrize("user_text, assistant_text", [("", ""), ("  \n ", " ' ")])
    def test_returns_none_without_words(self, user_text: str, assistant_text: str) -> None:
        assert infer_title(user_text, assistant_text) is None

    def test_keeps_non_ascii_text(self) -> None:
        assert infer_title("¿qué tal? 👋") == "¿qué tal? 👋"
