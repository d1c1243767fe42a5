"""
Configuration Management
========================

All settings of the agent come from environment variables (optionally via
a .env file) and are validated here into frozen dataclasses.

Usage:
    from callagent.utils.config import get_config

    config = get_config()
    print(config.openai.model)
    print(config.max_recursions)

Environment:
    OPENAI_API_KEY          required
    OPENAI_BASE_URL         default https://api.openai.com/v1
    OPENAI_MODEL            default gpt-3.5-turbo
    OPENAI_TEMPERATURE      default 0.7
    OPENAI_MAX_TOKENS       default 4096
    AGENT_SYSTEM_MESSAGE    optional system prompt
    AGENT_MAX_RECURSIONS    default 10
    AGENT_DEBUG             default false
    LOG_LEVEL               default info
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from callagent.utils.logger import Logger

logger = Logger("Config")

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096
DEFAULT_MAX_RECURSIONS = 10
DEFAULT_SYSTEM_MESSAGE = (
    "You are a friendly and helpful agent. "
    "Answer the user questions as good as you can."
)


def _required(name: str) -> str:
    """
    Get a required environment variable.

    Raises:
        ValueError: If the variable is not set
    """
    value = os.getenv(name)
    if not value:
        raise ValueError(
            f"Missing required environment variable: {name}\n"
            f"Please ensure {name} is set in your .env file."
        )
    return value


def _optional(name: str, default: str) -> str:
    return os.getenv(name) or default


def _optional_int(name: str, default: int) -> int:
    """Get an integer variable, falling back to the default when invalid."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{name} is not a valid integer, using default: {default}")
        return default


def _optional_float(name: str, default: float) -> float:
    """Get a float variable, falling back to the default when invalid."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"{name} is not a valid number, using default: {default}")
        return default


def _optional_bool(name: str, default: bool) -> bool:
    """True if the value is 'true', '1' or 'yes' (case-insensitive)."""
    value = os.getenv(name)
    if not value:
        return default
    return value.strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class OpenAIConfig:
    """Completion backend configuration."""
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS


@dataclass(frozen=True)
class AgentConfig:
    """
    Agent behaviour.

    Attributes:
        openai: Backend connection and generation parameters
        system_message: Prompt that opens every conversation
        max_recursions: Maximum backend requests per resolution chain
        debug_enabled: Trace every fragment and function call at DEBUG
        log_level: Minimum level of the agent logger when debug is off
    """
    openai: OpenAIConfig
    system_message: str = DEFAULT_SYSTEM_MESSAGE
    max_recursions: int = DEFAULT_MAX_RECURSIONS
    debug_enabled: bool = False
    log_level: str = "info"

    def __post_init__(self):
        if self.max_recursions < 1:
            raise ValueError(f"max_recursions must be at least 1, got {self.max_recursions}")


def load_config() -> AgentConfig:
    """
    Load and validate the configuration from the environment.

    Raises:
        ValueError: If OPENAI_API_KEY is missing or a value is out of range
    """
    load_dotenv()

    return AgentConfig(
        openai=OpenAIConfig(
            api_key=_required("OPENAI_API_KEY"),
            base_url=_optional("OPENAI_BASE_URL", DEFAULT_BASE_URL),
            model=_optional("OPENAI_MODEL", DEFAULT_MODEL),
            temperature=_optional_float("OPENAI_TEMPERATURE", DEFAULT_TEMPERATURE),
            max_tokens=_optional_int("OPENAI_MAX_TOKENS", DEFAULT_MAX_TOKENS),
        ),
        system_message=_optional("AGENT_SYSTEM_MESSAGE", DEFAULT_SYSTEM_MESSAGE),
        max_recursions=_optional_int("AGENT_MAX_RECURSIONS", DEFAULT_MAX_RECURSIONS),
        debug_enabled=_optional_bool("AGENT_DEBUG", False),
        log_level=_optional("LOG_LEVEL", "info"),
    )


# ==============================================================================
# Singleton
# ==============================================================================
# Loaded on first access and shared by every agent built without an
# explicit config.

_config_instance: AgentConfig | None = None


def get_config() -> AgentConfig:
    """Get the process-wide configuration, loading it on first use."""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Forget the cached configuration so the next get_config() reloads it."""
    global _config_instance
    _config_instance = None
