"""Application settings loaded from the environment."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from streamchat.llm.config import LLMConfig, load_config_from_env

MEMORY_STORAGE_URL = "memory://"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings(BaseModel):
    """Process-wide settings.

    Attributes:
        llm: Completion provider configuration
        storage_url: ``memory://`` or an async SQLAlchemy URL
        strict_writes: Commit turns with compare-and-swap
        log_level: Logging level name
        json_logs: Render logs as JSON
    """

    llm: LLMConfig = Field(default_factory=LLMConfig)
    storage_url: str = MEMORY_STORAGE_URL
    strict_writes: bool = False
    log_level: str = "INFO"
    json_logs: bool = True

    model_config = ConfigDict(frozen=True)


def load_settings_from_env() -> Settings:
    """Load settings from environment variables (and a .env file if present).

    Reads STREAMCHAT_STORAGE_URL, STREAMCHAT_STRICT_WRITES, LOG_LEVEL and
    JSON_LOGS, plus everything ``load_config_from_env`` reads.

    Returns:
        Settings loaded from environment
    """
    load_dotenv()

    return Settings(
        llm=load_config_from_env(),
        storage_url=os.getenv("STREAMCHAT_STORAGE_URL", MEMORY_STORAGE_URL),
        strict_writes=_env_flag("STREAMCHAT_STRICT_WRITES"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        json_logs=_env_flag("JSON_LOGS", "true"),
    )
