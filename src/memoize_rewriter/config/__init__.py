"""Configuration management.

This module provides configuration management through:
- RuntimeConfig: Runtime configuration from env vars, files, and CLI flags
- ApplicationMode: Enum for application execution modes
- ConfigError: Exception for configuration errors
"""

from memoize_rewriter.config.exceptions import ConfigError
from memoize_rewriter.config.runtime_config import ApplicationMode, RuntimeConfig

__all__ = ["ApplicationMode", "ConfigError", "RuntimeConfig"]
