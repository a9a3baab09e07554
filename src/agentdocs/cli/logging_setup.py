"""Logging configuration for the agentdocs CLI."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

from agentdocs.cli.console import error_console


def setup_logging(
    verbosity: int = 0,
    log_file: str | Path | None = None,
    logger_name: str = "agentdocs",
) -> logging.Logger:
    """
    Configure dual-handler logging (rich console + plain file).

    Args:
        verbosity: 0 shows warnings, 1 adds info, 2 or more adds debug
        log_file: Path to log file (None for no file logging)
        logger_name: Logger to configure

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Console handler
    levels = {0: logging.WARNING, 1: logging.INFO}
    console_handler = RichHandler(
        console=error_console, rich_tracebacks=True, show_path=False
    )
    console_handler.setLevel(levels.get(verbosity, logging.DEBUG))
    console_handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))
    logger.addHandler(console_handler)

    # File handler (if path provided)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger
