"""LLM configuration models and utilities.

This module provides configuration for the completion provider: the API
credential, the default model, the model allowlist and request limits.
"""

import os
import re
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_ALLOWED_MODELS = ["gpt-4o-mini", "gpt-4o", "gpt-4.1-mini"]

MODEL_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,200}$")

# Model families that accept a reasoning effort hint
REASONING_MODEL_PREFIXES = ("gpt-5", "o1", "o3", "o4")
REASONING_EFFORTS = ("minimal", "low", "medium", "high")


class LLMConfig(BaseModel):
    """Completion provider configuration.

    Attributes:
        api_key: Provider API key (sensitive - not logged)
        api_base: Optional custom API base URL
        default_model: Model used when a request names none
        allowed_models: Allowlist of model ids (None = syntax check only)
        timeout_ms: Upstream request timeout in milliseconds
        temperature: Sampling temperature

    Example:
        >>> config = LLMConfig(api_key="sk-...", allowed_models=["gpt-4o"])
        >>> config.is_model_allowed("gpt-4o")
        True
    """

    api_key: Optional[str] = Field(default=None, repr=False, description="API key (sensitive)")
    api_base: Optional[str] = Field(default=None, description="Base URL for API endpoint")
    default_model: str = Field(default=DEFAULT_MODEL, description="Default model")
    allowed_models: Optional[list[str]] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_MODELS),
        description="Approved models list (None=all syntactically valid ids allowed)",
    )
    timeout_ms: int = Field(
        default=60000, ge=1000, le=600000, description="Request timeout (1s-10min)"
    )
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)

    model_config = ConfigDict(frozen=True)

    @field_validator("default_model")
    @classmethod
    def validate_default_model(cls, value: str) -> str:
        """Validate that the default model is a well-formed identifier.

        Raises:
            ValueError: If the identifier is malformed
        """
        if not MODEL_ID_PATTERN.match(value):
            raise ValueError(f"Invalid default model identifier: {value!r}")
        return value

    @property
    def is_configured(self) -> bool:
        """Whether a provider credential is present."""
        return bool(self.api_key)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def is_model_allowed(self, model: str) -> bool:
        """Check a model id against the syntax rule and the allowlist."""
        if not MODEL_ID_PATTERN.match(model):
            return False
        return self.allowed_models is None or model in self.allowed_models


def is_valid_model_id(model: str) -> bool:
    """Check the identifier syntax (alphanumerics, dot, dash, underscore; 1-200 chars)."""
    return bool(MODEL_ID_PATTERN.match(model))


def supports_reasoning_effort(model: str) -> bool:
    """Whether the provider accepts a reasoning effort hint for ``model``."""
    return model.startswith(REASONING_MODEL_PREFIXES)


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config_from_env() -> LLMConfig:
    """Load LLM configuration from environment variables.

    Automatically loads variables from a .env file if present.

    Reads:
    - STREAMCHAT_OPENAI_API_KEY (or OPENAI_API_KEY): provider credential
    - STREAMCHAT_API_BASE: custom provider base URL
    - STREAMCHAT_DEFAULT_MODEL (or OPENAI_MODEL): default model
    - STREAMCHAT_ALLOWED_MODELS: comma-separated allowlist; empty disables it
    - STREAMCHAT_LLM_TIMEOUT_MS: upstream timeout in milliseconds
    - STREAMCHAT_LLM_TEMPERATURE: sampling temperature

    Returns:
        LLMConfig loaded from environment
    """
    load_dotenv()

    allowed_env = os.getenv("STREAMCHAT_ALLOWED_MODELS")
    if allowed_env is None:
        allowed_models: Optional[list[str]] = list(DEFAULT_ALLOWED_MODELS)
    else:
        allowed_models = _split_list(allowed_env) or None

    return LLMConfig(
        api_key=os.getenv("STREAMCHAT_OPENAI_API_KEY") or os.getenv("OPENAI_API_KEY"),
        api_base=os.getenv("STREAMCHAT_API_BASE") or None,
        default_model=(
            os.getenv("STREAMCHAT_DEFAULT_MODEL") or os.getenv("OPENAI_MODEL") or DEFAULT_MODEL
        ),
        allowed_models=allowed_models,
        timeout_ms=int(os.getenv("STREAMCHAT_LLM_TIMEOUT_MS", "60000")),
        temperature=float(os.getenv("STREAMCHAT_LLM_TEMPERATURE", "0.2")),
    )
