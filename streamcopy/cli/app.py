"""Main CLI application for streamcopy."""

import logging
import sys
from importlib.metadata import distribution
from typing import Annotated

import typer

from streamcopy.cli.decorators.error_handling import print_stack_trace_if_verbose
from streamcopy.config.settings import CopySettings, load_settings
from streamcopy.core.errors import ConfigError
from streamcopy.core.logging import setup_logging


__all__ = ["AppContext", "app", "main", "__version__", "setup_logging"]


__version__ = distribution("streamcopy").version

logger = logging.getLogger(__name__)


class AppContext:
    """Application context for storing shared state."""

    def __init__(
        self,
        settings: CopySettings,
        verbose: int = 0,
    ):
        """Initialize AppContext.

        Args:
            settings: Effective copy settings
            verbose: Verbosity level
        """
        self.settings = settings
        self.verbose = verbose


app = typer.Typer(
    name="streamcopy",
    help=f"""streamcopy v{__version__}

Copy files with buffered I/O, live progress and average throughput.

Common workflows:
  • Copy a file:        streamcopy copy big.iso /mnt/backup/big.iso
  • Custom chunking:    streamcopy copy a.bin b.bin --buffer-size 1048576
  • Show settings:      streamcopy config""",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG)",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging (equivalent to -vv)"),
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Log to file")
    ] = None,
    config_file: Annotated[
        str | None,
        typer.Option("-c", "--config", help="Path to YAML configuration file"),
    ] = None,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    """streamcopy - buffered stream copying with progress reporting."""
    if version:
        print(f"streamcopy v{__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit()

    try:
        settings = load_settings(config_file)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from e

    # CLI flags take precedence over the configured log level
    if debug or verbose >= 2:
        log_level = logging.DEBUG
    elif verbose == 1:
        log_level = logging.INFO
    else:
        log_level = settings.get_log_level_int()

    setup_logging(
        level=log_level,
        log_file=log_file or settings.log_file,
        json_logs=settings.json_logs,
    )

    ctx.obj = AppContext(settings=settings, verbose=verbose)


def main() -> int:
    """Main CLI entry point."""
    exit_code = 0

    try:
        app()
    except SystemExit as e:
        exit_code = e.code if isinstance(e.code, int) else 0
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        print_stack_trace_if_verbose()
        exit_code = 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
