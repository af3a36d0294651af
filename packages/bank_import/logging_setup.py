"""Logging for ``bank_import``.

Modules log through ``get_logger("bank_import.<module>")`` and stay silent
until an entrypoint calls :func:`configure_logging`. The CLI does that once
per process; embedding applications may instead attach their own handlers
to the ``"bank_import"`` logger.

``BANK_IMPORT_LOG_LEVEL`` (name or number) sets the level when none is passed.
"""

from __future__ import annotations

import logging
import os
from typing import IO

PACKAGE_LOGGER = "bank_import"
LEVEL_ENV = "BANK_IMPORT_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


class _ImportLogHandler(logging.StreamHandler):
    """Marker type so a configured package logger can be recognized."""


def _level_from(value: int | str | None) -> int | None:
    if value is None or isinstance(value, int):
        return value
    text = value.strip().upper()
    if text.isdigit():
        return int(text)
    named = logging.getLevelName(text)
    return named if isinstance(named, int) else None


def resolve_level(level: int | str | None = None) -> int:
    """Explicit level, else ``BANK_IMPORT_LOG_LEVEL``, else ``INFO``."""

    for candidate in (level, os.getenv(LEVEL_ENV)):
        resolved = _level_from(candidate)
        if resolved is not None:
            return resolved
    return logging.INFO


def is_configured() -> bool:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    return any(isinstance(h, _ImportLogHandler) for h in pkg.handlers)


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Send package records to ``stream`` (``sys.stderr`` when omitted).

    Later calls are no-ops. Records stop propagating to the root logger so
    they are not printed twice by a host that also logs to stderr.
    """

    if is_configured():
        return

    pkg = logging.getLogger(PACKAGE_LOGGER)
    for h in [h for h in pkg.handlers if isinstance(h, logging.NullHandler)]:
        pkg.removeHandler(h)

    resolved = resolve_level(level)
    handler = _ImportLogHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    pkg.setLevel(resolved)
    pkg.addHandler(handler)
    pkg.propagate = False


def get_logger(name: str) -> logging.Logger:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if not pkg.handlers:
        # Silent until configured; avoids the "no handlers" fallback output.
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "is_configured", "resolve_level"]
