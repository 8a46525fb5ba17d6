"""CLI enhance and analyze-image commands for dictate-ai.

Run the active provider against text or an image, using the stored
selection, prompts and temperature.
"""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, Progress, TextColumn

from dictate_ai.cli.common import ConfigOption, LogLevelOption, load_runtime
from dictate_ai.exceptions import ProviderError
from dictate_ai.logging import get_logger
from dictate_ai.orchestrator import EnhancementOrchestrator
from dictate_ai.output import console, print_error

_logger = get_logger("CLI.enhance")


def _run_with_progress(description: str, work) -> str:
    """Run ``work(on_progress)`` under a progress bar and return its text."""

    async def run() -> str:
        with Progress(
            TextColumn("[bold green]{task.description}"),
            BarColumn(),
            console=console,
            transient=True,
        ) as progress:
            task_id = progress.add_task(description, total=1.0)
            return await work(lambda fraction: progress.update(task_id, completed=fraction))

    return asyncio.run(run())


def enhance(
    text: Annotated[str, typer.Argument(help="Transcribed text to improve")],
    context: Annotated[
        str | None, typer.Option("--context", help="Extra context for the model")
    ] = None,
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Improve transcribed text with the active provider.

    Examples:
        dictate-ai enhance "so um i think we should ship it tomorrow"
        dictate-ai enhance "call bob" --context "Slack, #release channel"
    """
    settings, store = load_runtime(config, log_level)
    orchestrator = EnhancementOrchestrator(store, endpoints=settings.endpoints)
    _logger.info("CLI enhance: {} chars", len(text))

    async def work(on_progress) -> str:
        try:
            return await orchestrator.enhance(text, context=context, on_progress=on_progress)
        finally:
            await orchestrator.aclose()

    try:
        result = _run_with_progress(f"Enhancing with {orchestrator.active_provider.display_name}", work)
    except ProviderError as e:
        print_error(f"{e.provider}: {e}")
        raise typer.Exit(code=1) from None

    console.print(result)


def analyze_image(
    path: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="PNG or JPEG image"),
    ],
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Describe a screenshot with the selected vision model.

    Examples:
        dictate-ai analyze-image ~/Desktop/screenshot.png
    """
    settings, store = load_runtime(config, log_level)
    orchestrator = EnhancementOrchestrator(store, endpoints=settings.endpoints)
    image = path.read_bytes()
    _logger.info("CLI analyze-image: {} ({} bytes)", path, len(image))

    async def work(on_progress) -> str:
        try:
            return await orchestrator.analyze_image(image, on_progress=on_progress)
        finally:
            await orchestrator.aclose()

    try:
        result = _run_with_progress(f"Analyzing with {orchestrator.active_provider.display_name}", work)
    except ProviderError as e:
        print_error(f"{e.provider}: {e}")
        raise typer.Exit(code=1) from None

    console.print(result)
