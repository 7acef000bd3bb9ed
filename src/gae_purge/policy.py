"""Retention policy for deployed versions.

A policy combines two independent keep rules:
- ``keep_daily_amount``: for each of the trailing N UTC calendar days
  (today included), keep the most recently deployed version of that day
- ``keep_minimum``: keep the N most recently deployed versions not already
  kept by the daily rule

Only versions of ``project``/``service`` are ever considered.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_SERVICE = "default"
DEFAULT_KEEP_MINIMUM = 20
DEFAULT_KEEP_DAILY_AMOUNT = 7


@dataclass(frozen=True)
class RetentionPolicy:
    """Configuration for version retention.

    Attributes:
        project: Cloud project whose versions are considered.
        service: App Engine service within the project.
        keep_minimum: Most-recent versions always retained, independent of date.
        keep_daily_amount: Trailing days that each retain their latest version.
    """

    project: str
    service: str = DEFAULT_SERVICE
    keep_minimum: int = DEFAULT_KEEP_MINIMUM
    keep_daily_amount: int = DEFAULT_KEEP_DAILY_AMOUNT

    def __post_init__(self) -> None:
        if not self.project:
            raise ValueError("project must be a non-empty string")
        if not self.service:
            raise ValueError("service must be a non-empty string")
        for name in ("keep_minimum", "keep_daily_amount"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    def in_scope(self, project: str, service: str) -> bool:
        return project == self.project and service == self.service


__all__ = [
    "DEFAULT_KEEP_DAILY_AMOUNT",
    "DEFAULT_KEEP_MINIMUM",
    "DEFAULT_SERVICE",
    "RetentionPolicy",
]
