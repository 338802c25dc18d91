"""Logging setup for the CLI and the terminal UI.

Modules log through ``logging.getLogger(__name__)``; this module only
decides where records end up. Console commands get a Rich handler, the
Textual app gets Textual's handler so log lines never draw over the
screen.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

TARGET_CONSOLE = "console"
TARGET_TEXTUAL = "textual"


def configure_logging(
    level: str = "WARNING",
    target: str = TARGET_CONSOLE,
    log_file: str | Path | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the ``gnabber`` logger.

    Args:
        level: Level name (debug, info, warning, error)
        target: "console" for a Rich stderr handler, "textual" for the TUI
        log_file: Optional file that receives every record as well
        console: Rich console to log to (defaults to stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("gnabber")
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if target == TARGET_TEXTUAL:
        from textual.logging import TextualHandler
        handler: logging.Handler = TextualHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    elif target == TARGET_CONSOLE:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        raise ValueError(
            f"Unsupported log target: {target}. "
            f"Supported targets: {TARGET_CONSOLE}, {TARGET_TEXTUAL}"
        )
    logger.addHandler(handler)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
