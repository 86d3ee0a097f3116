"""Runtime configuration management with environment variable and file support.

This module provides the RuntimeConfig system for managing rewriter settings
from multiple sources: defaults, config files (YAML/TOML), environment
variables, and CLI flags. Configuration precedence: CLI flags > env vars >
config file > defaults.
"""

import logging
import os
import sys
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any

from memoize_rewriter.config.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Available configuration presets
PRESET_NAMES = {"strict", "legacy"}

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ApplicationMode(str, Enum):
    """Application execution modes for the rewriter.

    Attributes:
        APPLY: Plan and apply the rewrites.
        DRY_RUN: Plan the rewrites and report edits without changing the source.
    """

    APPLY = "apply"
    DRY_RUN = "dry-run"

    def __str__(self) -> str:
        """Return string representation of mode."""
        return self.value


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """Runtime configuration for the memoize rewriter.

    Attributes:
        mode: Application execution mode (apply, dry-run).
        adapter_name: Name of the memoize adapter called by generated wrappers.
        check_name_collisions: Reject a rewrite whose mangled name is already used.
        reject_overloads: Reject every match of a name matched more than once.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs to stderr only.

    Example:
        >>> config = RuntimeConfig.from_env()
        >>> config = config.merge_with_cli(mode=ApplicationMode.DRY_RUN)
        >>> print(f"Mode: {config.mode}")
        Mode: dry-run
    """

    mode: ApplicationMode
    adapter_name: str
    check_name_collisions: bool
    reject_overloads: bool
    log_level: str
    log_file: str | None

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ConfigError: If any configuration value is invalid.
        """
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}"
            )

        if not isinstance(self.mode, ApplicationMode):
            raise ConfigError(f"mode must be ApplicationMode enum, got {type(self.mode).__name__}")

        if not isinstance(self.adapter_name, str) or not self.adapter_name.isidentifier():
            raise ConfigError(f"adapter_name must be a plain identifier, got {self.adapter_name!r}")

        if not self.check_name_collisions:
            logger.warning(
                "Name collision checks are disabled; a mangled name that is already "
                "in use produces invalid output."
            )

    @classmethod
    def from_defaults(cls) -> "RuntimeConfig":
        """Create configuration with default values.

        Returns:
            RuntimeConfig with safe default values.

        Example:
            >>> config = RuntimeConfig.from_defaults()
            >>> assert config.mode == ApplicationMode.APPLY
            >>> assert config.check_name_collisions is True
        """
        return cls(
            mode=ApplicationMode.APPLY,
            adapter_name="memoize",
            check_name_collisions=True,
            reject_overloads=True,
            log_level="INFO",
            log_file=None,
        )

    @classmethod
    def from_strict(cls) -> "RuntimeConfig":
        """Create strict configuration (same as defaults)."""
        return cls.from_defaults()

    @classmethod
    def from_legacy(cls) -> "RuntimeConfig":
        """Create configuration that skips collision and overload checks.

        Reproduces the unchecked rewrite: every match is rewritten even when
        its mangled name or its name is shared with another symbol.

        Returns:
            RuntimeConfig with all safety checks disabled.
        """
        return cls(
            mode=ApplicationMode.APPLY,
            adapter_name="memoize",
            check_name_collisions=False,
            reject_overloads=False,
            log_level="INFO",
            log_file=None,
        )

    @classmethod
    def from_preset(cls, name: str) -> "RuntimeConfig":
        """Create configuration from a named preset.

        Raises:
            ConfigError: If the preset is unknown.
        """
        preset = name.lower()
        if preset not in PRESET_NAMES:
            raise ConfigError(f"Unknown preset '{name}'. Must be one of {sorted(PRESET_NAMES)}")
        return cls.from_strict() if preset == "strict" else cls.from_legacy()

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Create configuration from environment variables.

        Loads configuration from environment variables with MR_ prefix:
        - MR_MODE: Application mode (default: "apply")
        - MR_ADAPTER_NAME: Memoize adapter name (default: "memoize")
        - MR_CHECK_COLLISIONS: Check mangled names (default: "true")
        - MR_REJECT_OVERLOADS: Reject overloaded matches (default: "true")
        - MR_LOG_LEVEL: Logging level (default: "INFO")
        - MR_LOG_FILE: Log file path (default: None)

        Returns:
            RuntimeConfig loaded from environment variables.

        Raises:
            ConfigError: If environment variable has invalid value.

        Example:
            >>> os.environ["MR_MODE"] = "dry-run"
            >>> config = RuntimeConfig.from_env()
            >>> assert config.mode == ApplicationMode.DRY_RUN
        """
        defaults = cls.from_defaults()

        mode_str = os.getenv("MR_MODE", defaults.mode.value).lower()
        try:
            mode = ApplicationMode(mode_str)
        except ValueError as e:
            valid_modes = [m.value for m in ApplicationMode]
            raise ConfigError(f"Invalid MR_MODE='{mode_str}'. Must be one of {valid_modes}") from e

        def parse_bool(env_var: str, default: bool) -> bool:
            """Parse boolean environment variable."""
            value = os.getenv(env_var, str(default)).lower()
            if value in ("true", "1", "yes", "on"):
                return True
            if value in ("false", "0", "no", "off"):
                return False
            raise ConfigError(
                f"Invalid {env_var}='{value}'. Must be true/false, 1/0, yes/no, or on/off"
            )

        return cls(
            mode=mode,
            adapter_name=os.getenv("MR_ADAPTER_NAME", defaults.adapter_name),
            check_name_collisions=parse_bool("MR_CHECK_COLLISIONS", defaults.check_name_collisions),
            reject_overloads=parse_bool("MR_REJECT_OVERLOADS", defaults.reject_overloads),
            log_level=os.getenv("MR_LOG_LEVEL", defaults.log_level).upper(),
            log_file=os.getenv("MR_LOG_FILE") or defaults.log_file,
        )

    @classmethod
    def from_file(cls, config_path: Path) -> "RuntimeConfig":
        """Load configuration from YAML or TOML file.

        Args:
            config_path: Path to configuration file (YAML or TOML).

        Returns:
            RuntimeConfig loaded from file.

        Raises:
            ConfigError: If file doesn't exist, has invalid format, or contains invalid values.

        Example:
            >>> config = RuntimeConfig.from_file(Path("memoize.yaml"))
        """
        try:
            config_path = Path(config_path).resolve()
        except (OSError, ValueError) as e:
            raise ConfigError(f"Invalid config file path: {e}") from e

        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        if not config_path.is_file():
            raise ConfigError(f"Config path is not a file: {config_path}")

        suffix = config_path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            return cls._load_from_yaml(config_path)
        elif suffix == ".toml":
            return cls._load_from_toml(config_path)
        else:
            raise ConfigError(
                f"Unsupported config file format: {suffix}. Must be .yaml, .yml, or .toml"
            )

    @classmethod
    def _load_from_yaml(cls, config_path: Path) -> "RuntimeConfig":
        """Load configuration from YAML file.

        Raises:
            ConfigError: If YAML is malformed or contains invalid values.
        """
        import yaml

        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping/dict, got {type(data).__name__}")

        return cls._from_dict(data, config_path)

    @classmethod
    def _load_from_toml(cls, config_path: Path) -> "RuntimeConfig":
        """Load configuration from TOML file.

        Raises:
            ConfigError: If TOML is malformed or contains invalid values.
        """
        # Python 3.11+ has tomllib built-in, otherwise use tomli
        if sys.version_info >= (3, 11):  # noqa: UP036
            import tomllib
        else:
            import tomli as tomllib

        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read {config_path}: {e}") from e

        return cls._from_dict(data, config_path)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], source: Path) -> "RuntimeConfig":
        """Create RuntimeConfig from dictionary (internal helper).

        Accepted layout::

            mode: apply
            adapter_name: memoize
            checks:
              name_collisions: true
              overloads: true
            logging:
              level: INFO
              file: rewrite.log

        Raises:
            ConfigError: If dictionary contains invalid values.
        """
        defaults = cls.from_defaults()

        mode_value = data.get("mode", defaults.mode.value)
        try:
            mode = ApplicationMode(mode_value)
        except ValueError as e:
            valid_modes = [m.value for m in ApplicationMode]
            raise ConfigError(
                f"Invalid mode '{mode_value}' in {source}. Must be one of {valid_modes}"
            ) from e

        checks = data.get("checks", {})
        if isinstance(checks, dict):
            check_name_collisions = checks.get("name_collisions", defaults.check_name_collisions)
            reject_overloads = checks.get("overloads", defaults.reject_overloads)
        elif isinstance(checks, bool):
            check_name_collisions = checks
            reject_overloads = checks
        else:
            raise ConfigError(f"Invalid checks type in {source}: {type(checks).__name__}")

        logging_config = data.get("logging", {})
        if isinstance(logging_config, dict):
            log_level = logging_config.get("level", defaults.log_level)
            log_file = logging_config.get("file", defaults.log_file)
        else:
            log_level = defaults.log_level
            log_file = defaults.log_file

        return cls(
            mode=mode,
            adapter_name=str(data.get("adapter_name", defaults.adapter_name)),
            check_name_collisions=bool(check_name_collisions),
            reject_overloads=bool(reject_overloads),
            log_level=str(log_level).upper(),
            log_file=str(log_file) if log_file else None,
        )

    def merge_with_cli(self, **overrides: Any) -> "RuntimeConfig":  # noqa: ANN401
        """Create new config with CLI flag overrides.

        Only non-None values are applied.

        Raises:
            ConfigError: If override value is invalid.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}

        if "mode" in filtered_overrides and isinstance(filtered_overrides["mode"], str):
            try:
                filtered_overrides["mode"] = ApplicationMode(filtered_overrides["mode"])
            except ValueError as e:
                valid_modes = [m.value for m in ApplicationMode]
                raise ConfigError(
                    f"Invalid mode '{filtered_overrides['mode']}'. Must be one of {valid_modes}"
                ) from e

        try:
            return replace(self, **filtered_overrides)
        except ConfigError:
            raise
        except TypeError as e:
            raise ConfigError(f"Failed to apply CLI overrides: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Example:
            >>> config = RuntimeConfig.from_defaults()
            >>> data = config.to_dict()
            >>> assert data["mode"] == "apply"
        """
        return {
            "mode": self.mode.value,
            "adapter_name": self.adapter_name,
            "check_name_collisions": self.check_name_collisions,
            "reject_overloads": self.reject_overloads,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }
