"""Shared console and output helpers for the dictate-ai CLI.

Provides a single Console instance and formatting utilities.
"""

from rich.console import Console

# Shared console instance - use this everywhere for consistent output
console = Console()


def format_stars(count: int, maximum: int = 5) -> str:
    """Render a 0..maximum rating as filled and empty dots.

    Args:
        count: Filled positions.
        maximum: Total positions.

    Returns:
        e.g. "●●●○○" for 3 of 5.
    """
    count = max(0, min(maximum, count))
    return "●" * count + "○" * (maximum - count)


def format_tokens(count: int) -> str:
    """Format a token count for display (e.g. "128K", "8192")."""
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 10_000:
        return f"{count // 1_000}K"
    return str(count)


def print_success(message: str) -> None:
    """Print a success message with green checkmark.

    Args:
        message: The message to display.
    """
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str, suggestion: str | None = None) -> None:
    """Print an error message with red X and optional suggestion.

    Args:
        message: The error message.
        suggestion: Optional suggestion for how to fix the error.
    """
    console.print(f"[red]✗ {message}[/red]")
    if suggestion:
        console.print(f"\n{suggestion}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠ {message}[/yellow]")


def print_info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {message}")
