"""Human-readable formatting and sinks for purge log lines.

Progress is reported as plain strings passed to a log sink, any callable
taking one string. The CLI uses :func:`stdout_log`; library callers that do
not care pass nothing and get :func:`discard_log`.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from datetime import timedelta

LogSink = Callable[[str], None]


def stdout_log(message: str) -> None:
    sys.stdout.write(message + "\n")


def discard_log(message: str) -> None:
    """Drop the message."""


_DURATION_UNITS: tuple[tuple[str, int], ...] = (
    ("y", 365 * 86400),
    ("d", 86400),
    ("h", 3600),
    ("m", 60),
    ("s", 1),
)


def format_duration(delta: timedelta) -> str:
    """Format a time span as compact compound units.

    Example:
        >>> format_duration(timedelta(days=2, hours=3, seconds=5))
        '2d 3h 5s'
        >>> format_duration(timedelta(milliseconds=250))
        '250ms'
    """
    total_ms = round(delta.total_seconds() * 1000)
    sign = "-" if total_ms < 0 else ""
    total_ms = abs(total_ms)

    if total_ms < 1000:
        return f"{sign}{total_ms}ms"

    remaining = total_ms // 1000
    parts: list[str] = []
    for suffix, size in _DURATION_UNITS:
        amount, remaining = divmod(remaining, size)
        if amount:
            parts.append(f"{amount}{suffix}")
    return sign + " ".join(parts)


def format_bytes(n: int) -> str:
    """Format bytes as human-readable string."""
    value = float(n)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} PB"


__all__ = ["LogSink", "discard_log", "format_bytes", "format_duration", "stdout_log"]
