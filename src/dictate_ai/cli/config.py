"""CLI config commands for dictate-ai.

Provides subcommands for configuration management:
- show: Display resolved configuration values
"""

from pathlib import Path

import typer
from rich.table import Table

from dictate_ai.cli.common import ConfigOption, LogLevelOption, load_runtime
from dictate_ai.config.loader import discover_config_path
from dictate_ai.logging import LOG_DIR, get_logger
from dictate_ai.output import console

_logger = get_logger("CLI.config")

config_app = typer.Typer(
    name="config",
    help="Manage configuration",
    no_args_is_help=True,
)


@config_app.command()
def show(
    config: ConfigOption = None,
    log_level: LogLevelOption = "INFO",
) -> None:
    """Show resolved configuration values.

    Displays all configuration settings with their sources:
    - File: From TOML configuration file
    - Default: Built-in default values

    Examples:
        dictate-ai config show
        dictate-ai config show --config /path/to/config.toml
    """
    settings, store = load_runtime(config, log_level)
    _logger.info("CLI config show command")

    config_file: Path | None = config
    if config:
        config_source = "explicit path"
    else:
        config_file = discover_config_path()
        if config_file is None:
            config_source = "none (using defaults)"
        elif config_file.parent == Path("."):
            config_source = "current directory"
        else:
            config_source = "user config"

    console.print()
    if config_file:
        console.print(f"[cyan]Configuration file:[/cyan] {config_file}")
        console.print(f"[dim]Source: {config_source}[/dim]\n")
    else:
        console.print("[yellow]No configuration file found[/yellow]")
        console.print("[dim]Using default values[/dim]\n")

    source = "File" if config_file else "Default"

    table = Table(show_header=True, box=None, padding=(0, 2))
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_column("Source", style="dim")

    table.add_row("[bold]Endpoints[/bold]", "", "")
    table.add_row("  ollama_url", settings.endpoints.ollama_url, source)
    table.add_row("  lmstudio_url", settings.endpoints.lmstudio_url, source)
    table.add_row("  groq_url", settings.endpoints.groq_url, source)
    table.add_row("  gemini_url", settings.endpoints.gemini_url, source)

    table.add_row("", "", "")  # Spacer
    table.add_row("[bold]Storage[/bold]", "", "")
    table.add_row("  settings_path", str(settings.storage.settings_path), source)
    table.add_row("  models_dir", str(settings.storage.models_dir), source)

    table.add_row("", "", "")  # Spacer
    table.add_row("[bold]Logging[/bold]", "", "")
    table.add_row("  level", settings.logging.level, source)
    table.add_row("  log_dir", str(LOG_DIR), "Default")

    console.print(table)

    enhancement = store.settings.enhancement
    console.print("\n[bold cyan]Enhancement settings[/bold cyan]")
    console.print(f"  Provider:    {enhancement.active_provider.display_name}")
    console.print(f"  Enabled:     {str(enhancement.enabled).lower()}")
    console.print(f"  Text model:  {enhancement.selected_text_model}")
    console.print(f"  Image model: {enhancement.selected_image_model}")
    console.print("\n[bold cyan]Transcription model[/bold cyan]")
    console.print(f"  {store.settings.transcription.selected_model}")
    console.print()
