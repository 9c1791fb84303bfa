"""Tests for LLM configuration."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from streamchat.llm.config import (
    DEFAULT_ALLOWED_MODELS,
    DEFAULT_MODEL,
    LLMConfig,
    is_valid_model_id,
    load_config_from_env,
    supports_reasoning_effort,
)


class TestLLMConfig:
    def test_defaults(self) -> None:
        config = LLMConfig()

        assert config.default_model == "gpt-4o-mini"
        assert config.allowed_models == ["gpt-4o-mini", "gpt-4o", "gpt-4.1-mini"]
        assert config.temperature == 0.2
        assert config.timeout_seconds == 60.0
        assert config.is_configured is False

    def test_api_key_not_in_repr(self) -> None:
        assert "sk-secret" not in repr(LLMConfig(api_key="sk-secret"))

    def test_invalid_default_model_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LLMConfig(default_model="not a model")

    def test_timeout_bounds(self) -> None:
        with pytest.raises(ValidationError):
            LLMConfig(timeout_ms=10)

    def test_config_is_frozen(self) -> None:
        config = LLMConfig()

        with pytest.raises(ValidationError):
            config.api_key = "changed"  # type: ignore[misc]

    def test_is_model_allowed_uses_allowlist(self) -> None:
        config = LLMConfig(allowed_models=["gpt-4o"])

        assert config.is_model_allowed("gpt-4o")
        assert not config.is_model_allowed("gpt-4o-mini")

    def test_is_model_allowed_without_allowlist_checks_syntax(self) -> None:
        config = LLMConfig(allowed_models=None)

        assert config.is_model_allowed("anything.goes_here-1")
        assert not config.is_model_allowed("bad/model")


@pytest.mark.parametrize(
    "model, expected",
    [
        ("gpt-4o-mini", True),
        ("a", True),
        ("x" * 200, True),
        ("x" * 201, False),
        ("", False),
        ("gpt 4o", False),
        ("models/gpt", False),
    ],
)
def test_is_valid_model_id(model: str, expected: bool) -> None:
    assert is_valid_model_id(model) is expected


@pytest.mark.parametrize(
    "model, expected",
    [("o3-mini", True), ("gpt-5", True), ("o1", True), ("gpt-4o", False), ("gpt-4.1-mini", False)],
)
def test_supports_reasoning_effort(model: str, expected: bool) -> None:
    assert supports_reasoning_effort(model) is expected


class TestLoadConfigFromEnv:
    @patch("streamchat.llm.config.load_dotenv")
    def test_reads_prefixed_variables(self, _load_dotenv, monkeypatch) -> None:
        monkeypatch.setenv("STREAMCHAT_OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("STREAMCHAT_DEFAULT_MODEL", "gpt-4o")
        monkeypatch.setenv("STREAMCHAT_ALLOWED_MODELS", "gpt-4o, o3-mini ,")
        monkeypatch.setenv("STREAMCHAT_LLM_TIMEOUT_MS", "5000")
        monkeypatch.setenv("STREAMCHAT_LLM_TEMPERATURE", "0.7")

        config = load_config_from_env()

        assert config.api_key == "sk-env"
        assert config.default_model == "gpt-4o"
        assert config.allowed_models == ["gpt-4o", "o3-mini"]
        assert config.timeout_ms == 5000
        assert config.temperature == 0.7

    @patch("streamchat.llm.config.load_dotenv")
    def test_falls_back_to_openai_variables(self, _load_dotenv, monkeypatch) -> None:
        for name in (
            "STREAMCHAT_OPENAI_API_KEY",
            "STREAMCHAT_DEFAULT_MODEL",
            "STREAMCHAT_ALLOWED_MODELS",
            "STREAMCHAT_API_BASE",
        ):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1-mini")

        config = load_config_from_env()

        assert config.api_key == "sk-openai"
        assert config.default_model == "gpt-4.1-mini"
        assert config.allowed_models == DEFAULT_ALLOWED_MODELS
        assert config.api_base is None

    @patch("streamchat.llm.config.load_dotenv")
    def test_empty_allowlist_disables_it(self, _load_dotenv, monkeypatch) -> None:
        monkeypatch.setenv("STREAMCHAT_ALLOWED_MODELS", "")
        monkeypatch.delenv("STREAMCHAT_DEFAULT_MODEL", raising=False)
        monkeypatch.delenv("OPENAI_MODEL", raising=False)

        config = load_config_from_env()

        assert config.allowed_models is None
        assert config.default_model == DEFAULT_MODEL
