"""CLI providers commands for dictate-ai.

Provides subcommands for AI enhancement backends:
- status: Show providers and check the active one
- models: List the active provider's text or vision models
- use: Switch the active provider
- set-key: Store an API key for a remote provider
- test: Test the connection to the active provider
"""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from dictate_ai.cli.common import ConfigOption, LogLevelOption, load_runtime
from dictate_ai.logging import get_logger
from dictate_ai.orchestrator import CONNECTION_OK, EnhancementOrchestrator
from dictate_ai.output import (
    console,
    create_catalog_table,
    create_providers_table,
    print_error,
    print_success,
    print_warning,
)
from dictate_ai.providers.schema import ProviderKind

_logger = get_logger("CLI.providers")

providers_app = typer.Typer(
    name="providers",
    help="Manage AI enhancement providers",
    no_args_is_help=True,
)


def _orchestrator(config: Path | None, log_level: str) -> EnhancementOrchestrator:
    settings, store = load_runtime(config, log_level)
    return EnhancementOrchestrator(store, endpoints=settings.endpoints)


async def _activate(orchestrator: EnhancementOrchestrator) -> None:
    try:
        await orchestrator.activate()
    finally:
        await orchestrator.aclose()


@providers_app.command()
def status(
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Show all providers and check the active one.

    Examples:
        dictate-ai providers status
    """
    orchestrator = _orchestrator(config, log_level)
    settings = orchestrator.settings
    console.print(create_providers_table(settings.active_provider, settings.credentials))

    with console.status(f"[bold green]Checking {settings.active_provider.display_name}...[/bold green]"):
        asyncio.run(_activate(orchestrator))

    state = orchestrator.state
    console.print()
    if state.provider_available:
        print_success(f"{settings.active_provider.display_name} is available")
    elif state.error_message:
        print_error(state.error_message)
    else:
        print_warning(f"{settings.active_provider.display_name} is not available")

    enabled = "[green]enabled[/green]" if settings.enabled else "[dim]disabled[/dim]"
    console.print(f"\n  Enhancement: {enabled}")
    console.print(f"  Text model:  {settings.selected_text_model}")
    console.print(f"  Image model: {settings.selected_image_model}")
    console.print(f"  Temperature: {settings.temperature}")
    console.print()


@providers_app.command("models")
def list_models(
    image: Annotated[
        bool, typer.Option("--image", "-i", help="Show vision-capable models only")
    ] = False,
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """List models offered by the active provider.

    Examples:
        dictate-ai providers models
        dictate-ai providers models --image
    """
    orchestrator = _orchestrator(config, log_level)
    kind = orchestrator.active_provider

    with console.status(f"[bold green]Loading models from {kind.display_name}...[/bold green]"):
        asyncio.run(_activate(orchestrator))

    state = orchestrator.state
    error = state.image_error_message if image else state.error_message
    models = state.image_models if image else state.text_models
    if error:
        print_error(error)
    if not models:
        if not error:
            print_warning(f"No models available from {kind.display_name}")
        raise typer.Exit(code=1)

    selected = (
        orchestrator.settings.selected_image_model if image
        else orchestrator.settings.selected_text_model
    )
    title = f"{kind.display_name} {'Vision' if image else 'Text'} Models"
    console.print(create_catalog_table(models, title=title, selected=selected))
    console.print(f"\n[dim]{len(models)} models[/dim]")


@providers_app.command()
def use(
    provider: Annotated[ProviderKind, typer.Argument(help="Provider to activate")],
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Switch the active provider.

    Examples:
        dictate-ai providers use ollama
        dictate-ai providers use groq
    """
    orchestrator = _orchestrator(config, log_level)
    _logger.info("CLI providers use: {}", provider.value)

    async def switch() -> None:
        try:
            await orchestrator.set_provider(provider)
        finally:
            await orchestrator.aclose()

    with console.status(f"[bold green]Switching to {provider.display_name}...[/bold green]"):
        asyncio.run(switch())

    print_success(f"Active provider: {provider.display_name}")
    if orchestrator.state.error_message:
        print_warning(orchestrator.state.error_message)
    elif not provider.is_local and not orchestrator.settings.credential_for(provider):
        console.print("\nSet an API key with:")
        console.print(f"  dictate-ai providers set-key {provider.value}")


@providers_app.command("set-key")
def set_key(
    provider: Annotated[ProviderKind, typer.Argument(help="Remote provider")],
    api_key: Annotated[
        str,
        typer.Option("--key", "-k", prompt=True, hide_input=True, help="API key (empty to clear)"),
    ],
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Store an API key for a remote provider. Makes no network calls.

    Examples:
        dictate-ai providers set-key groq
        dictate-ai providers set-key gemini --key AIza...
    """
    if provider.is_local:
        print_error(f"{provider.display_name} does not use an API key")
        raise typer.Exit(code=1)

    orchestrator = _orchestrator(config, log_level)
    orchestrator.set_credential(provider, api_key.strip())
    if api_key.strip():
        print_success(f"API key saved for {provider.display_name}")
    else:
        print_success(f"API key cleared for {provider.display_name}")


@providers_app.command()
def test(
    config: ConfigOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Test the connection to the active provider.

    Examples:
        dictate-ai providers test
    """
    orchestrator = _orchestrator(config, log_level)
    kind = orchestrator.active_provider

    async def run_test() -> None:
        try:
            await orchestrator.test_connection()
        finally:
            await orchestrator.aclose()

    with console.status(f"[bold green]Testing {kind.display_name}...[/bold green]"):
        asyncio.run(run_test())

    if orchestrator.state.connection_status == CONNECTION_OK:
        print_success(f"{kind.display_name}: {CONNECTION_OK}")
        return
    print_error(f"{kind.display_name}: {orchestrator.state.connection_status}")
    raise typer.Exit(code=1)
