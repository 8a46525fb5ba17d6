"""Configuration loader for dictate-ai.

Handles TOML file loading, path discovery, and resolution priority:
1. CLI arguments (highest priority)
2. TOML file (discovered or explicit)
3. Default values (lowest priority)
"""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dictate_ai.config.schema import (
    DictateConfig,
    EndpointsConfig,
    LoggingConfig,
    StorageConfig,
)
from dictate_ai.exceptions import ConfigError
from dictate_ai.logging import get_logger

_logger = get_logger("Config")

USER_CONFIG_PATH = Path.home() / ".config" / "dictate-ai" / "config.toml"


def load_config(
    config_path: Path | None = None,
    log_level: str | None = None,
    models_dir: Path | None = None,
) -> DictateConfig:
    """Load and resolve dictate-ai configuration.

    Path discovery (when config_path is None):
    1. ./config.toml (current directory)
    2. ~/.config/dictate-ai/config.toml (user config)
    3. Use defaults if neither exists

    Args:
        config_path: Explicit path to config TOML file
        log_level: Log level (CLI override)
        models_dir: Models directory (CLI override)

    Returns:
        DictateConfig: Resolved configuration

    Raises:
        ConfigError: If the TOML file cannot be read, parsed or validated
    """
    _logger.debug(
        "Loading config: config_path={}, log_level={}, models_dir={}",
        config_path, log_level, models_dir,
    )

    toml_config: dict[str, Any] = {}

    if config_path:
        _logger.debug("Loading explicit config file: {}", config_path)
        toml_config = _load_toml_file(config_path)
    else:
        discovered_path = _discover_config_path()
        if discovered_path:
            _logger.debug("Discovered config file: {}", discovered_path)
            toml_config = _load_toml_file(discovered_path)
        else:
            _logger.debug("No config file found, using defaults")

    storage_dict = dict(toml_config.get("storage", {}))
    if models_dir is not None:
        storage_dict["models_dir"] = models_dir

    logging_dict = dict(toml_config.get("logging", {}))
    if log_level is not None:
        logging_dict["level"] = log_level.upper()

    try:
        config = DictateConfig(
            endpoints=EndpointsConfig(**toml_config.get("endpoints", {})),
            storage=StorageConfig(**storage_dict),
            logging=LoggingConfig(**logging_dict),
        )
    except ValidationError as e:
        _logger.error("Invalid configuration: {}", e)
        raise ConfigError(f"Invalid configuration: {e}") from e

    config.storage.settings_path = config.storage.settings_path.expanduser()
    config.storage.models_dir = config.storage.models_dir.expanduser()

    _logger.info(
        "Config loaded: models_dir={}, settings={}",
        config.storage.models_dir, config.storage.settings_path,
    )
    return config


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file.

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            config = tomllib.load(f)
            _logger.debug("Successfully loaded TOML file: {}", path)
            return config
    except FileNotFoundError as e:
        _logger.error("Config file not found: {}", path)
        raise ConfigError(f"Config file not found: {path}") from e
    except Exception as e:
        _logger.error("Failed to parse config file {}: {}", path, e)
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e


def discover_config_path() -> Path | None:
    """Return the first existing config file in discovery order, if any."""
    return _discover_config_path()


def _discover_config_path() -> Path | None:
    current_dir_config = Path("config.toml")
    if current_dir_config.exists():
        return current_dir_config

    if USER_CONFIG_PATH.exists():
        return USER_CONFIG_PATH

    return None
