"""
Utilities Module
================

Common utilities shared across the package:
- logger: Colored, context-aware console logging
- config: Environment-driven configuration
"""

from callagent.utils.logger import Logger, LogLevel, logger
from callagent.utils.config import AgentConfig, OpenAIConfig, get_config

__all__ = ["Logger", "LogLevel", "logger", "AgentConfig", "OpenAIConfig", "get_config"]
