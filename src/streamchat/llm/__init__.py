"""Completion provider configuration and gateway."""

from streamchat.llm.config import LLMConfig, load_config_from_env, supports_reasoning_effort
from streamchat.llm.gateway import (
    Completion,
    CompletionGateway,
    CompletionOptions,
    LiteLLMGateway,
    to_upstream_error,
)

__all__ = [
    "LLMConfig",
    "load_config_from_env",
    "supports_reasoning_effort",
    "Completion",
    "CompletionGateway",
    "CompletionOptions",
    "LiteLLMGateway",
    "to_upstream_error",
]
