"""Config command for streamcopy CLI."""

import json

import typer

from streamcopy.cli.app import AppContext
from streamcopy.cli.decorators import handle_errors


@handle_errors
def config_command(ctx: typer.Context) -> None:
    """Show the effective settings as JSON."""
    app_ctx: AppContext = ctx.obj
    print(json.dumps(app_ctx.settings.model_dump(mode="json"), indent=2))


def register_commands(app: typer.Typer) -> None:
    """Register config command with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="config")(config_command)
