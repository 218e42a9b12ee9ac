"""Logging setup helpers built on loguru."""

import sys
from typing import Any, TextIO, Union

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def configure_logging(
    level: Union[str, int] = "INFO",
    sink: Union[TextIO, Any] = sys.stderr,
) -> int:
    """
    Replace loguru's default handler with a single sink at the given level.

    The library only emits records; applications decide where they go by
    calling this once at startup.

    Args:
        level: Minimum level name or number, e.g. "DEBUG".
        sink: Any loguru-compatible sink (stream, path, callable).

    Returns:
        Handler id, usable with logger.remove().
    """
    logger.remove()
    return logger.add(sink, level=level, format=LOG_FORMAT)
