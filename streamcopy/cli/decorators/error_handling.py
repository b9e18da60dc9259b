"""Error handling decorators for CLI commands."""

import logging
import sys
import traceback
from collections.abc import Callable
from functools import wraps
from typing import Any

import typer

from streamcopy.core.errors import (
    ConfigError,
    CopyDestinationExistsError,
    CopySameFileError,
    InvalidCopyArgumentError,
)
from streamcopy.core.structlog_logger import get_struct_logger


__all__ = ["handle_errors", "print_stack_trace_if_verbose"]

logger = get_struct_logger(__name__)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to handle common exceptions in CLI commands.

    Logs an error event and exits with status 1.

    Args:
        func: The function to decorate

    Returns:
        Decorated function with error handling
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (typer.Exit, typer.BadParameter):
            raise
        except ConfigError as e:
            _report("configuration_error", e)
            raise typer.Exit(1) from e
        except InvalidCopyArgumentError as e:
            _report("invalid_argument", e)
            raise typer.Exit(1) from e
        except CopyDestinationExistsError as e:
            _report("destination_exists", e)
            raise typer.Exit(1) from e
        except CopySameFileError as e:
            _report("same_file", e)
            raise typer.Exit(1) from e
        except FileNotFoundError as e:
            _report("file_not_found", e)
            raise typer.Exit(1) from e
        except OSError as e:
            _report("io_error", e)
            raise typer.Exit(1) from e
        except Exception as e:
            exc_info = logging.getLogger().isEnabledFor(logging.DEBUG)
            logger.error("unexpected_error", error=str(e), exc_info=exc_info)
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e

    return wrapper


def _report(event: str, error: Exception) -> None:
    logger.error(event, error=str(error))
    print(f"Error: {error}", file=sys.stderr)
    print_stack_trace_if_verbose()


def print_stack_trace_if_verbose() -> None:
    """Print stack trace if verbose/debug mode is enabled."""
    if any(arg in sys.argv for arg in ["-v", "-vv", "--verbose", "--debug"]):
        print("\nStack trace:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
