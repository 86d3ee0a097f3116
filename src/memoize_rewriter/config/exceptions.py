"""Configuration exceptions for the memoize rewriter.

Kept in their own module to avoid circular imports between the configuration
loader and the CLI.
"""


class ConfigError(Exception):
    """Exception raised for configuration errors."""
