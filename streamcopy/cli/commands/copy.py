"""Copy command for streamcopy CLI."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from streamcopy.cli.app import AppContext
from streamcopy.cli.decorators import handle_errors
from streamcopy.core.file_operations import CopyProgress, CopyResult, StreamCopyService
from streamcopy.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)


def _build_service(
    app_ctx: AppContext,
    buffer_size: int | None,
    update_interval: int | None,
    dynamic_interval: bool,
) -> StreamCopyService:
    """Create a service from settings, with CLI options taking precedence."""
    settings = app_ctx.settings

    if update_interval is not None and dynamic_interval:
        raise typer.BadParameter(
            "--update-interval and --dynamic-interval are mutually exclusive"
        )

    if update_interval is None and not dynamic_interval:
        update_interval = settings.update_interval
        dynamic_interval = settings.dynamic_update_interval

    return StreamCopyService(
        buffer_size=buffer_size if buffer_size is not None else settings.buffer_size,
        update_interval=update_interval,
        dynamic_update_interval=dynamic_interval,
    )


def _print_summary(console: Console, destination: Path, result: CopyResult) -> None:
    if result.cancelled:
        console.print(
            f"[yellow]Copy cancelled[/yellow] after {result.bytes_copied:,} "
            f"of {result.total_bytes:,} bytes"
        )
        return

    console.print(
        f"[green]✓[/green] Copied {result.bytes_copied:,} bytes to {destination} "
        f"in {result.elapsed_time:.2f}s ({result.speed_summary})"
    )


@handle_errors
def copy_command(
    ctx: typer.Context,
    source: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="File to copy"),
    ],
    destination: Annotated[Path, typer.Argument(help="Destination file path")],
    buffer_size: Annotated[
        int | None,
        typer.Option("--buffer-size", "-b", min=1, help="Chunk size in bytes"),
    ] = None,
    update_interval: Annotated[
        int | None,
        typer.Option(
            "--update-interval",
            "-u",
            min=1,
            help="Copied bytes between progress updates",
        ),
    ] = None,
    dynamic_interval: Annotated[
        bool,
        typer.Option(
            "--dynamic-interval",
            help="Derive the progress update interval from the file size",
        ),
    ] = False,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite an existing destination")
    ] = False,
    no_progress: Annotated[
        bool, typer.Option("--no-progress", help="Do not show a progress bar")
    ] = False,
) -> None:
    """Copy a file with buffered I/O and live progress.

    Progress is refreshed every update interval; the summary reports the
    lifetime average throughput of the copy.
    """
    app_ctx: AppContext = ctx.obj
    service = _build_service(app_ctx, buffer_size, update_interval, dynamic_interval)
    console = Console()

    if destination.is_dir():
        destination = destination / source.name

    logger.info(
        "copy_command_started",
        source=str(source),
        destination=str(destination),
        buffer_size=service.buffer_size,
    )

    if no_progress:
        result = service.copy_file(source, destination, overwrite=force)
    else:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console,
            transient=True,
        ) as progress_bar:
            task = progress_bar.add_task(
                f"Copying {source.name}", total=source.stat().st_size
            )

            def on_progress(progress: CopyProgress) -> None:
                progress_bar.update(
                    task, completed=progress.bytes_copied, total=progress.total_bytes
                )

            result = service.copy_file(
                source, destination, progress_callback=on_progress, overwrite=force
            )

    _print_summary(console, destination, result)


def register_commands(app: typer.Typer) -> None:
    """Register copy command with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="copy")(copy_command)
