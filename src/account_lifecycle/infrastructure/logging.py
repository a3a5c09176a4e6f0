"""Process logging setup for the account API."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_CHATTY_LIBRARY_LOGGERS = ("aiosqlite", "sqlalchemy.engine", "multipart")


def configure_logging(*, level: str) -> None:
    """Apply the runtime level to the app and keep driver loggers at WARNING or above."""

    normalized_level = level.strip().upper() or "INFO"
    resolved_level = logging.getLevelName(normalized_level)
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO

    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT)
    for name in _CHATTY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))
