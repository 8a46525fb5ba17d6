"""Table factory methods for the dictate-ai CLI.

Provides consistent table styling across all commands.
"""

from rich.table import Table

from dictate_ai.models.schema import CuratedModelInfo, ModelInfo
from dictate_ai.output.console import format_stars, format_tokens
from dictate_ai.providers.schema import ProviderKind, RemoteAIModel


def create_providers_table(
    active: ProviderKind,
    credentials: dict[ProviderKind, str],
) -> Table:
    """Create a table listing every provider.

    Args:
        active: Currently active provider, marked in the first column.
        credentials: Stored API keys; only their presence is shown.

    Returns:
        A Rich Table with one row per provider.
    """
    table = Table(title="AI Providers", expand=True)
    table.add_column("", width=2)
    table.add_column("Provider", style="cyan", no_wrap=True)
    table.add_column("Kind", style="blue")
    table.add_column("API Key", justify="center")
    table.add_column("Description", style="dim")

    for kind in ProviderKind:
        marker = "[green]●[/green]" if kind is active else ""
        if kind.is_local:
            key = "[dim]n/a[/dim]"
        else:
            key = "[green]set[/green]" if credentials.get(kind) else "[yellow]missing[/yellow]"
        table.add_row(marker, kind.display_name, kind.category.value, key, kind.description)

    return table


def create_catalog_table(
    models: list[RemoteAIModel],
    title: str,
    selected: str | None = None,
) -> Table:
    """Create a table for a provider model catalog.

    Args:
        models: Catalog entries in display order.
        title: Table title.
        selected: Id of the selected model, marked with a check.

    Returns:
        A Rich Table with catalog data.
    """
    table = Table(title=title, expand=True)
    table.add_column("", width=2)
    table.add_column("Model", style="cyan", no_wrap=True, ratio=3)
    table.add_column("Owner", style="blue")
    table.add_column("Context", style="green", justify="right")
    table.add_column("Max Out", style="green", justify="right")
    table.add_column("Loaded", justify="center")

    for model in models:
        marker = "[green]✓[/green]" if model.id == selected else ""
        table.add_row(
            marker,
            model.id,
            model.owned_by,
            format_tokens(model.context_window_tokens),
            format_tokens(model.max_completion_tokens),
            "yes" if model.active else "[dim]no[/dim]",
        )

    return table


def create_curated_models_table(
    models: list[CuratedModelInfo],
    selected: str,
    title: str = "Recommended Models",
) -> Table:
    """Create a table for the curated transcription models."""
    table = Table(title=title, expand=True)
    table.add_column("", width=2)
    table.add_column("Model", style="cyan", no_wrap=True)
    table.add_column("Accuracy", style="magenta")
    table.add_column("Speed", style="magenta")
    table.add_column("Size", style="green", justify="right")
    table.add_column("Downloaded", justify="center")
    table.add_column("Name", style="dim")

    for model in models:
        table.add_row(
            "[blue]✓[/blue]" if model.internal_name == selected else "",
            model.display_name,
            format_stars(model.accuracy_stars),
            format_stars(model.speed_stars),
            model.storage_size_label,
            "[green]✓[/green]" if model.is_downloaded else "",
            model.internal_name,
        )

    return table


def create_all_models_table(
    models: list[ModelInfo],
    selected: str,
    recommended: str,
    title: str = "All Models",
) -> Table:
    """Create a table for the full downloadable catalog."""
    table = Table(title=title, expand=True)
    table.add_column("", width=2)
    table.add_column("Model", style="cyan", no_wrap=True, ratio=3)
    table.add_column("Downloaded", justify="center")

    for model in models:
        name = f"{model.name} [dim](Recommended)[/dim]" if model.name == recommended else model.name
        table.add_row(
            "[blue]✓[/blue]" if model.name == selected else "",
            name,
            "[green]✓[/green]" if model.is_downloaded else "",
        )

    return table
