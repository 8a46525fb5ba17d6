"""Helpers shared by the CLI command modules."""

from pathlib import Path
from typing import Annotated

import typer

from dictate_ai.config import ConfigError, DictateConfig, SettingsStore, load_config
from dictate_ai.logging import configure_logging
from dictate_ai.output import print_error

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Config file path"),
]
LogLevelOption = Annotated[
    str,
    typer.Option("--log-level", "-l", help="Log level"),
]


def load_runtime(config_path: Path | None, log_level: str) -> tuple[DictateConfig, SettingsStore]:
    """Configure logging, then load config and the settings store.

    Exits with code 1 on an invalid config file.
    """
    configure_logging(log_level=log_level, console=False)
    try:
        config = load_config(config_path=config_path, log_level=log_level)
    except ConfigError as e:
        print_error(str(e), "Check the file with: dictate-ai config show")
        raise typer.Exit(code=1) from None
    return config, SettingsStore(config.storage.settings_path)
