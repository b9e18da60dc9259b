"""Command-line interface for streamcopy using Typer."""

from streamcopy.cli.app import AppContext, app, main
from streamcopy.cli.commands import register_all_commands


register_all_commands(app)

__all__ = ["AppContext", "app", "main"]
