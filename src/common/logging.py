"""Logging configuration for the content engine build tools."""

from __future__ import annotations

import logging
import sys

APP_LOGGER = "content_engine"


def setup_logging(
    level: int = logging.INFO,
    module_name: str = APP_LOGGER,
) -> logging.Logger:
    """Configure the application logger and return a logger for a module.

    All module loggers are children of ``content_engine`` so a single call to
    :func:`set_debug` changes the verbosity of every stage.

    Args:
        level: Logging level applied the first time the app logger is configured.
        module_name: Name for the logger instance, relative to the app logger.

    Returns:
        Configured logger.
    """
    app_logger = logging.getLogger(APP_LOGGER)

    if not app_logger.handlers:
        app_logger.setLevel(level)

        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        app_logger.addHandler(handler)

    if module_name == APP_LOGGER:
        return app_logger
    return logging.getLogger(f"{APP_LOGGER}.{module_name}")


def set_debug(enabled: bool) -> None:
    """Switch every content engine logger between DEBUG and INFO."""
    setup_logging().setLevel(logging.DEBUG if enabled else logging.INFO)
