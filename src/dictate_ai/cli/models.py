"""CLI models commands for dictate-ai.

Provides subcommands for on-device transcription models:
- list: Show curated or all models with download status
- select: Select the transcription model (prewarms if downloaded)
- download: Download a model from the Hugging Face Hub
- delete: Remove a downloaded model
- prewarm: Load a model into memory ahead of first use
- open: Reveal the models folder
"""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from dictate_ai.cli.common import ConfigOption, LogLevelOption, load_runtime
from dictate_ai.lifecycle import ModelLifecycleManager
from dictate_ai.logging import get_logger
from dictate_ai.models.repository import HuggingFaceModelRepository
from dictate_ai.models.schema import ModelWarmStatus
from dictate_ai.output import (
    console,
    create_all_models_table,
    create_curated_models_table,
    print_error,
    print_info,
    print_success,
    print_warning,
)

_logger = get_logger("CLI.models")

models_app = typer.Typer(
    name="models",
    help="Download and manage on-device transcription models",
    no_args_is_help=True,
)

ModelArgument = Annotated[
    str | None,
    typer.Argument(help="Model name (defaults to the selected model)"),
]


def _manager(config: Path | None, log_level: str) -> ModelLifecycleManager:
    settings, store = load_runtime(config, log_level)
    repository = HuggingFaceModelRepository(settings.storage.models_dir)
    return ModelLifecycleManager(store, repository)


def _print_warm_status(manager: ModelLifecycleManager) -> None:
    status = manager.warm_status
    if status is ModelWarmStatus.WARM:
        print_success(f"{manager.selected_model} is warm")
    elif manager.state.prewarm_error:
        print_warning(f"Prewarm failed: {manager.state.prewarm_error}")
    else:
        print_info(f"{manager.selected_model} is {status.value}")


@models_app.command("list")
def list_models(
    all_models: Annotated[
        bool, typer.Option("--all", "-a", help="Show every model in the repository")
    ] = False,
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """List transcription models.

    By default, shows the curated list. Use --all for the full catalog.

    Examples:
        dictate-ai models list
        dictate-ai models list --all
    """
    manager = _manager(config, log_level)
    if all_models:
        manager.toggle_model_display()

    with console.status("[bold green]Fetching models...[/bold green]"):
        asyncio.run(manager.fetch_models())

    state = manager.state
    if not state.available_models:
        print_warning("No models found")
        console.print("\nCheck your network connection, or download a model with:")
        console.print("  dictate-ai models download <name>")
        raise typer.Exit(code=1)

    if state.show_all_models:
        table = create_all_models_table(
            state.available_models, manager.selected_model, state.recommended_model
        )
    else:
        table = create_curated_models_table(state.curated_models, manager.selected_model)
    console.print(table)
    console.print(f"\n[dim]Recommended: {state.recommended_model}[/dim]")
    console.print(f"[dim]Location: {manager.models_dir}[/dim]")


@models_app.command()
def select(
    name: Annotated[str, typer.Argument(help="Model name")],
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Select the transcription model, prewarming it when downloaded.

    Examples:
        dictate-ai models select openai_whisper-small
    """
    manager = _manager(config, log_level)
    _logger.info("CLI models select: {}", name)

    with console.status(f"[bold green]Selecting {name}...[/bold green]"):
        asyncio.run(manager.select_model(name))

    print_success(f"Selected {name}")
    _print_warm_status(manager)


async def _download_with_progress(manager: ModelLifecycleManager, name: str) -> None:
    with Progress(
        TextColumn("[bold green]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task(f"Downloading {name}", total=1.0)
        job = asyncio.create_task(manager.download(name))
        while not job.done():
            progress.update(task_id, completed=manager.state.download_progress)
            await asyncio.sleep(0.1)
        await job
        progress.update(task_id, completed=manager.state.download_progress)


@models_app.command()
def download(
    name: ModelArgument = None,
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Download a model from the Hugging Face Hub.

    Examples:
        dictate-ai models download
        dictate-ai models download openai_whisper-large-v3-v20240930
    """
    manager = _manager(config, log_level)
    target = name or manager.selected_model
    _logger.info("CLI models download: {}", target)

    asyncio.run(_download_with_progress(manager, target))

    if manager.state.download_error:
        print_error(manager.state.download_error)
        raise typer.Exit(code=1)
    print_success(f"Downloaded {target}")
    if target == manager.selected_model:
        _print_warm_status(manager)


@models_app.command()
def delete(
    name: ModelArgument = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Delete a downloaded model.

    Examples:
        dictate-ai models delete openai_whisper-tiny
    """
    manager = _manager(config, log_level)
    target = name or manager.selected_model
    if not yes:
        typer.confirm(f"Delete {target}?", abort=True)

    asyncio.run(manager.delete(target))

    if manager.state.download_error:
        print_error(manager.state.download_error)
        raise typer.Exit(code=1)
    print_success(f"Deleted {target}")


@models_app.command()
def prewarm(
    name: ModelArgument = None,
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Load a downloaded model into memory ahead of first use.

    Examples:
        dictate-ai models prewarm
    """
    manager = _manager(config, log_level)
    target = name or manager.selected_model

    async def run() -> bool:
        if not await manager.is_downloaded(target):
            return False
        await manager.prewarm(target)
        return True

    with console.status(f"[bold green]Prewarming {target}...[/bold green]"):
        downloaded = asyncio.run(run())

    if not downloaded:
        print_error(f"{target} is not downloaded", f"Download it with:\n  dictate-ai models download {target}")
        raise typer.Exit(code=1)
    if manager.state.prewarm_error:
        print_warning(f"Prewarm failed: {manager.state.prewarm_error}")
        raise typer.Exit(code=1)
    if target == manager.selected_model:
        print_success(f"{target} is warm")
    else:
        print_success(f"Prewarmed {target}")
        _print_warm_status(manager)


@models_app.command("open")
def open_location(
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Reveal the models folder in the file manager.

    Examples:
        dictate-ai models open
    """
    manager = _manager(config, log_level)
    path = manager.open_storage_location()
    console.print(f"[cyan]Models folder:[/cyan] {path}")
