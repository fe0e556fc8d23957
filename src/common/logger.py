"""Logging utilities with rich console output.

Every module gets its logger the same way:

    from common.logger import get_logger

    logger = get_logger(__name__)
    logger.debug("Fetching: repos/acme/widgets/issues/12")
    logger.warning("Could not fetch issue #12")

CLI entry points call ``setup_logging`` once; the console helpers at the bottom
print user-facing status lines that should not carry a logger prefix.
"""

import logging
import os
import sys

from rich.console import Console
from rich.logging import RichHandler

from common.env import env

# Shared console so log records and status lines interleave correctly
console = Console()
err_console = Console(stderr=True)

# Root handler installed by setup_logging
_root_handler: logging.Handler | None = None


def _rich_handler(show_time: bool, show_path: bool) -> RichHandler:
    handler = RichHandler(
        console=err_console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=True,
        markup=True,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def get_logger(
    name: str,
    level: str | None = None,
    show_time: bool = False,
    show_path: bool = False,
) -> logging.Logger:
    """Get a logger that renders through rich.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Logging level name. If None, uses LOG_LEVEL or defaults to INFO.
        show_time: Show timestamp in log output
        show_path: Show source location in log output

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if _root_handler is not None and _root_handler in logging.getLogger().handlers:
        # setup_logging already owns output; the root handler and level apply
        if level:
            logger.setLevel(level.upper())
        return logger

    if logger.handlers:
        return logger

    logger.setLevel((level or env.log_level()).upper())
    logger.addHandler(_rich_handler(show_time, show_path))

    # Keep propagation on so pytest's caplog receives records
    logger.propagate = True

    return logger


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure the root logger for a CLI run.

    Loggers already handed out by ``get_logger`` lose their own handler and
    level, so each record is written once and ``level`` decides what shows.

    Args:
        level: Default level; LOG_LEVEL overrides it when set
        log_file: Optional path that also receives plain-text records
    """
    global _root_handler

    for module_logger in logging.Logger.manager.loggerDict.values():
        if not isinstance(module_logger, logging.Logger):
            continue
        rich_handlers = [h for h in module_logger.handlers if isinstance(h, RichHandler)]
        if not rich_handlers:
            continue
        for handler in rich_handlers:
            module_logger.removeHandler(handler)
            handler.close()
        module_logger.setLevel(logging.NOTSET)

    _root_handler = _rich_handler(show_time=False, show_path=False)
    root_logger = logging.getLogger()
    root_logger.setLevel(os.getenv("LOG_LEVEL", level).upper())
    root_logger.handlers.clear()
    root_logger.addHandler(_root_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)


def progress(message: str) -> None:
    """Print a plain status line."""
    console.print(message)


def success(message: str) -> None:
    """Print a status line with a green check mark."""
    console.print(f"[green]✓[/green] {message}")


def warning(message: str) -> None:
    """Print a status line with a yellow warning sign."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def error(message: str) -> None:
    """Print an error line to stderr with a red cross."""
    err_console.print(f"[red]✗[/red] {message}")
    sys.stderr.flush()
