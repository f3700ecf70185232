"""Centralized logging helpers.

Provides a single place to configure the root logger, plus small utilities
used across the codebase for structured DEBUG traces: ``extra_context`` for
consistent ``extra=`` fields, ``safe_url``/``redact`` to keep credentials out
of logs, and a ``Timer`` context manager for request durations.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from constants import Constants

_SENSITIVE_PARAMS = ("token", "key", "secret", "password", "signature", "auth")
_TOKEN_PATTERN = re.compile(r"(?i)(bearer\s+)[A-Za-z0-9\-\._~\+/]+=*")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger.

    The level is taken from the argument, then PLUGFETCH_LOG_LEVEL, then INFO.
    Calling this more than once replaces the previously installed handler.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_plugfetch", False):
            root.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler._plugfetch = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by logger."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records, dropping None values."""
    return {k: v for k, v in fields.items() if v is not None}


def redact(text: str) -> str:
    """Mask bearer tokens in free-form text."""
    if not text:
        return text
    return _TOKEN_PATTERN.sub(r"\1[REDACTED]", text)


def safe_url(url: str) -> str:
    """Return url with userinfo and sensitive query values masked."""
    if not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.netloc
    if "@" in netloc:
        netloc = "[REDACTED]@" + netloc.rsplit("@", 1)[1]
    query = parts.query
    if query:
        pairs = []
        for k, v in parse_qsl(query, keep_blank_values=True):
            if any(s in k.lower() for s in _SENSITIVE_PARAMS):
                v = "[REDACTED]"
            pairs.append((k, v))
        query = urlencode(pairs)
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> float:
        """Elapsed milliseconds, measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000, 2)
