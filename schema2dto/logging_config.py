"""Logging setup for schema2dto.

Modules obtain their logger through :func:`get_logger`; the CLI calls
:func:`configure_logging` once to attach a rich handler.
"""

import logging

from rich.logging import RichHandler

PACKAGE_LOGGER = "schema2dto"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the package logger."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(level: int | str = logging.WARNING, show_path: bool = False) -> None:
    """Attach a RichHandler to the package logger.

    Args:
        level: Logging level name or number.
        show_path: Whether rich should print the source location of records.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(show_path=show_path, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
