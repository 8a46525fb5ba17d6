"""CLI entry point for dictate-ai."""

import typer

from dictate_ai.cli.config import config_app
from dictate_ai.cli.enhance import analyze_image, enhance
from dictate_ai.cli.models import models_app
from dictate_ai.cli.providers import providers_app

app = typer.Typer(
    name="dictate-ai",
    help="AI text enhancement and on-device model management for dictation",
    no_args_is_help=True,
)

app.add_typer(providers_app, name="providers")
app.add_typer(models_app, name="models")
app.add_typer(config_app, name="config")
app.command("enhance")(enhance)
app.command("analyze-image")(analyze_image)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from dictate_ai import __version__

        typer.echo(f"dictate-ai version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """dictate-ai: AI text enhancement and on-device model management for dictation."""
    pass
