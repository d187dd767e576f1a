"""Logging helpers for dualopt.

All package loggers live under the ``dualopt`` namespace, write to stderr and
default to WARNING so that a solve is silent unless the caller asks for
progress output.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_loggers: dict[str, logging.Logger] = {}


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the cached logger for ``name`` (usually ``__name__``).

    Names outside the package are nested under ``dualopt.`` so that
    :func:`set_log_level` and :func:`configure_logging` reach them.

    Example:
        >>> from dualopt.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("iteration %d", 3)
    """
    if name is None:
        name = "dualopt"
    if name != "dualopt" and not name.startswith("dualopt."):
        name = f"dualopt.{name}"

    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every dualopt logger, including ones created later.

    Args:
        level: A ``logging`` constant or its name (``"DEBUG"``, ``"INFO"``...).
    """
    global _DEFAULT_LEVEL
    level = _resolve_level(level)
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Replace the handlers of all dualopt loggers.

    Args:
        level: Logging level (default: WARNING).
        format_string: Record format; defaults to ``[LEVEL] name: message``.
        stream: Output stream (default: ``sys.stderr``).

    Example:
        >>> import logging
        >>> from dualopt.logging import configure_logging
        >>> configure_logging(level=logging.INFO)
    """
    global _DEFAULT_LEVEL
    level = _resolve_level(level)
    formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    _DEFAULT_LEVEL = level


__all__ = ["get_logger", "set_log_level", "configure_logging"]
