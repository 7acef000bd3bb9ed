"""Partition deployed versions into kept versions and deletion candidates.

The classifier walks in-scope, zero-traffic versions from most to least
recently deployed and applies the two keep rules of a
:class:`~gae_purge.policy.RetentionPolicy` in order:

1. Day bucket: the version's UTC deployment date is one of the trailing
   ``keep_daily_amount`` days and no newer version has claimed that day yet.
2. Recency: fewer than ``keep_minimum`` versions have been kept by this rule.

A version whose day is already claimed falls through to the recency rule.
Anything left over is a deletion candidate. Serving versions and versions of
other projects/services appear in neither list.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from .formatting import LogSink, discard_log, format_duration
from .policy import RetentionPolicy
from .versions import VersionRecord


@dataclass(frozen=True)
class VersionDecision:
    """The outcome for one in-scope version."""

    record: VersionRecord
    keep: bool
    reason: str

    @property
    def version_id(self) -> str:
        return self.record.id


@dataclass(frozen=True)
class Classification:
    """Result of classifying a version listing.

    Attributes:
        kept: Ids protected by a keep rule, most recent first.
        candidates_for_deletion: Ids protected by neither rule, most recent first.
        decisions: One decision per in-scope zero-traffic version.
    """

    kept: list[str] = field(default_factory=list)
    candidates_for_deletion: list[str] = field(default_factory=list)
    decisions: list[VersionDecision] = field(default_factory=list)

    @property
    def reclaimable_bytes(self) -> int:
        return sum(d.record.disk_usage_bytes for d in self.decisions if not d.keep)


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def trailing_days(now: datetime, amount: int) -> list[date]:
    """Return ``amount`` UTC dates ending at ``now``'s date, newest first."""
    today = _utc(now).date()
    return [today - timedelta(days=i) for i in range(amount)]


def select_in_scope(records: Iterable[VersionRecord], policy: RetentionPolicy) -> list[VersionRecord]:
    """Filter to deletable versions of the policy's project and service."""
    return [
        record
        for record in records
        if policy.in_scope(record.project, record.service) and not record.is_serving
    ]


def classify(
    now: datetime,
    records: Iterable[VersionRecord],
    policy: RetentionPolicy,
    *,
    log: LogSink | None = None,
) -> Classification:
    """Classify versions under a retention policy.

    Args:
        now: Reference instant; naive values are taken as UTC.
        records: Parsed version listing. Not modified.
        policy: Retention policy to apply.
        log: Optional sink receiving one line per decision.

    Returns:
        Classification with disjoint ``kept`` and ``candidates_for_deletion``.
    """
    emit = log or discard_log
    now = _utc(now)

    candidates = select_in_scope(records, policy)
    # sorted() is stable so equal timestamps keep listing order
    candidates = sorted(candidates, key=lambda r: r.last_deployed, reverse=True)

    day_buckets: dict[str, str | None] = {
        day.isoformat(): None for day in trailing_days(now, policy.keep_daily_amount)
    }
    kept_recent = 0

    kept: list[str] = []
    to_delete: list[str] = []
    decisions: list[VersionDecision] = []

    for record in candidates:
        deployed = f"deployed {format_duration(record.age(now))} ago"
        key = record.deployed_date_utc

        if key in day_buckets and day_buckets[key] is None:
            emit(f"Keeping for {key}: {record.id} ({deployed})")
            day_buckets[key] = record.id
            kept.append(record.id)
            decisions.append(VersionDecision(record=record, keep=True, reason=f"day:{key}"))
            continue

        if kept_recent < policy.keep_minimum:
            kept_recent += 1
            emit(f"Keeping for recent {kept_recent}: {record.id} ({deployed})")
            kept.append(record.id)
            decisions.append(VersionDecision(record=record, keep=True, reason=f"recent:{kept_recent}"))
            continue

        emit(f"Deleting {record.id} ({deployed})")
        to_delete.append(record.id)
        decisions.append(VersionDecision(record=record, keep=False, reason="unprotected"))

    return Classification(kept=kept, candidates_for_deletion=to_delete, decisions=decisions)


__all__ = [
    "Classification",
    "VersionDecision",
    "classify",
    "select_in_scope",
    "trailing_days",
]
