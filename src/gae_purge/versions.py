"""Deployed version records parsed from ``gcloud app versions list`` output.

Each entry of the JSON list printed by gcloud is converted into an immutable
:class:`VersionRecord`. Only the fields the purge needs are kept:

- ``id``, ``project``, ``service``: identity and scope
- ``traffic_split``: share of live traffic (absent means unknown)
- ``version.diskUsageBytes``: string-encoded size, reporting only
- ``last_deployed_time.datetime``: ISO-8601 deployment timestamp
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import VersionParseError


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 datetime string into an aware datetime.

    A trailing ``Z`` is accepted and naive timestamps are taken as UTC.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_disk_usage(value: Any) -> int:
    try:
        usage = int(value)
    except (TypeError, ValueError):
        return 0
    return max(usage, 0)


class VersionRecord(BaseModel):
    """A single deployed version of an App Engine service."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1)
    project: str
    service: str
    traffic_split: float | None = Field(default=None, description="None when gcloud omitted the split")
    disk_usage_bytes: int = Field(default=0, ge=0)
    last_deployed: datetime

    @field_validator("last_deployed", mode="before")
    @classmethod
    def _coerce_last_deployed(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_iso_datetime(value)
        return value

    @field_validator("last_deployed")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_serving(self) -> bool:
        """True unless the version is known to receive no traffic."""
        return self.traffic_split != 0.0

    @property
    def deployed_date_utc(self) -> str:
        """UTC calendar date of the deployment as ``YYYY-MM-DD``."""
        return self.last_deployed.astimezone(timezone.utc).date().isoformat()

    def age(self, now: datetime) -> timedelta:
        return now - self.last_deployed

    @classmethod
    def from_gcloud(cls, data: Mapping[str, Any]) -> VersionRecord:
        """Create a record from one entry of gcloud's JSON listing.

        Raises:
            VersionParseError: If the entry lacks an id, scope or timestamp.
        """
        if not isinstance(data, Mapping):
            raise VersionParseError(f"Version entry is not an object: {data!r}")

        version = data.get("version") or {}
        deployed = data.get("last_deployed_time") or {}
        if not isinstance(version, Mapping) or not isinstance(deployed, Mapping):
            raise VersionParseError(f"Malformed version entry: {data.get('id')!r}")

        try:
            return cls(
                id=data.get("id"),
                project=data.get("project"),
                service=data.get("service"),
                traffic_split=data.get("traffic_split"),
                disk_usage_bytes=_parse_disk_usage(version.get("diskUsageBytes")),
                last_deployed=deployed.get("datetime"),
            )
        except ValidationError as exc:
            raise VersionParseError(f"Invalid version entry {data.get('id')!r}: {exc}") from exc


def parse_version_records(entries: Iterable[Mapping[str, Any]]) -> list[VersionRecord]:
    """Parse every entry of a gcloud listing, preserving order."""
    return [VersionRecord.from_gcloud(entry) for entry in entries]


__all__ = [
    "VersionRecord",
    "parse_iso_datetime",
    "parse_version_records",
]
