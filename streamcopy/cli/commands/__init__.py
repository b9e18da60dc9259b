"""CLI command modules."""

import typer

from streamcopy.cli.commands.config import register_commands as register_config_commands
from streamcopy.cli.commands.copy import register_commands as register_copy_commands


def register_all_commands(app: typer.Typer) -> None:
    """Register all CLI commands with the main app.

    Args:
        app: The main Typer app
    """
    register_copy_commands(app)
    register_config_commands(app)
