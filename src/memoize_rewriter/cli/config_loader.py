"""Runtime configuration loading for CLI commands."""

import logging
import os
from pathlib import Path
from typing import Any

from memoize_rewriter.config.runtime_config import PRESET_NAMES, RuntimeConfig

logger = logging.getLogger(__name__)

ENV_VAR_MAP = {
    "mode": "MR_MODE",
    "adapter_name": "MR_ADAPTER_NAME",
    "check_name_collisions": "MR_CHECK_COLLISIONS",
    "reject_overloads": "MR_REJECT_OVERLOADS",
    "log_level": "MR_LOG_LEVEL",
    "log_file": "MR_LOG_FILE",
}


def load_runtime_config(
    config: str | None,
    cli_overrides: dict[str, Any],
) -> tuple[RuntimeConfig, str | None]:
    """Build the effective configuration for a command.

    Precedence: CLI flags > environment variables > config file or preset >
    defaults. Environment variables only override a preset or file for the
    settings they actually set.

    Args:
        config: Preset name (strict/legacy) or path to a YAML/TOML file.
        cli_overrides: Values from CLI flags; None means not given.

    Returns:
        Tuple of (configuration, preset name or None).

    Raises:
        ConfigError: If the preset, file, environment or overrides are invalid.
    """
    preset_name: str | None = None
    if config is None:
        base = RuntimeConfig.from_defaults()
    elif config.lower() in PRESET_NAMES:
        preset_name = config.lower()
        base = RuntimeConfig.from_preset(preset_name)
    else:
        base = RuntimeConfig.from_file(Path(config))

    env_config = RuntimeConfig.from_env()
    env_overrides = {
        field: getattr(env_config, field)
        for field, env_var in ENV_VAR_MAP.items()
        if os.getenv(env_var) is not None
    }
    if env_overrides:
        logger.debug("Applying environment overrides: %s", sorted(env_overrides))

    runtime_config = base.merge_with_cli(**env_overrides).merge_with_cli(**cli_overrides)

    return runtime_config, preset_name
