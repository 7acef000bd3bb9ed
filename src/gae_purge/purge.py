"""Purge old versions of an App Engine service.

This is the programmatic entry point. A run lists the service's versions,
classifies them under the retention policy built from :class:`PurgeOptions`,
and deletes the candidates in batches:

    >>> from gae_purge import PurgeOptions, purge_old_versions
    >>> deleted = purge_old_versions(PurgeOptions(project="my-project"))

Options may also come from a YAML file via :func:`load_purge_options`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .classify import classify
from .deleter import DELETE_BATCH_SIZE, delete_batched, validate_version_ids
from .errors import PurgeConfigError, PurgeFailedError
from .formatting import LogSink, format_bytes, stdout_log
from .gcloud import GcloudCliRunner, VersionManager
from .policy import (
    DEFAULT_KEEP_DAILY_AMOUNT,
    DEFAULT_KEEP_MINIMUM,
    DEFAULT_SERVICE,
    RetentionPolicy,
)
from .versions import parse_version_records

logger = logging.getLogger(__name__)

_CAMEL_CASE_KEYS = {"keepMinimum": "keep_minimum", "keepDailyAmount": "keep_daily_amount"}


class PurgeOptions(BaseModel):
    """Options for one purge run.

    ``keepMinimum`` and ``keepDailyAmount`` are accepted as aliases of the
    snake_case names.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    project: str = Field(..., min_length=1)
    service: str = Field(DEFAULT_SERVICE, min_length=1)
    keep_minimum: int = Field(
        DEFAULT_KEEP_MINIMUM,
        ge=0,
        validation_alias=AliasChoices("keep_minimum", "keepMinimum"),
    )
    keep_daily_amount: int = Field(
        DEFAULT_KEEP_DAILY_AMOUNT,
        ge=0,
        validation_alias=AliasChoices("keep_daily_amount", "keepDailyAmount"),
    )
    batch_size: int = Field(DELETE_BATCH_SIZE, ge=1)
    dry_run: bool = False
    log: LogSink = Field(default=stdout_log, exclude=True)

    @field_validator("project", "service")
    @classmethod
    def _reject_flag_like(cls, value: str) -> str:
        if value.startswith("-") or "\\" in value:
            raise ValueError(f"unsafe gcloud argument: {value!r}")
        return value

    def policy(self) -> RetentionPolicy:
        return RetentionPolicy(
            project=self.project,
            service=self.service,
            keep_minimum=self.keep_minimum,
            keep_daily_amount=self.keep_daily_amount,
        )


def load_purge_options(path: Path, **overrides: Any) -> PurgeOptions:
    """Load purge options from a YAML file.

    Args:
        path: YAML file holding a mapping of option names to values.
        **overrides: Options taking precedence over the file.

    Raises:
        FileNotFoundError: If the file does not exist.
        PurgeConfigError: If the file is not a mapping or fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Purge options file not found: {path}")

    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PurgeConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PurgeConfigError(f"Purge options in {path} must be a mapping")

    merged = {_CAMEL_CASE_KEYS.get(k, k): v for k, v in data.items()}
    merged.update({_CAMEL_CASE_KEYS.get(k, k): v for k, v in overrides.items()})
    try:
        return PurgeOptions.model_validate(merged)
    except ValidationError as e:
        raise PurgeConfigError(f"Invalid purge options in {path}: {e}") from e


def purge_old_versions(
    options: PurgeOptions | Mapping[str, Any],
    *,
    runner: VersionManager | None = None,
    now: datetime | None = None,
) -> int:
    """Purge old versions for the configured project and service.

    Args:
        options: PurgeOptions or a mapping of option values.
        runner: Lists and deletes versions; defaults to :class:`GcloudCliRunner`.
        now: Reference time for day buckets and ages; defaults to UTC now.

    Returns:
        Number of versions deleted, or that would be deleted on a dry run.

    Raises:
        VersionListError: If the versions could not be listed.
        VersionParseError: If the listing could not be parsed.
        InvalidVersionIdError: If a candidate id is unsafe to pass to gcloud.
        PurgeFailedError: If there were candidates but none were deleted.
    """
    if not isinstance(options, PurgeOptions):
        options = PurgeOptions.model_validate(options)
    if runner is None:
        runner = GcloudCliRunner()
    if now is None:
        now = datetime.now(timezone.utc)

    log = options.log
    policy = options.policy()

    entries = runner.list_versions(policy.project, policy.service)
    records = parse_version_records(entries)
    logger.debug("Parsed %d versions for %s/%s", len(records), policy.project, policy.service)

    result = classify(now, records, policy, log=log)
    candidates = result.candidates_for_deletion

    log(
        f"Keeping {len(result.kept)} versions, deleting {len(candidates)} "
        f"({format_bytes(result.reclaimable_bytes)})"
    )
    if not candidates:
        return 0

    if options.dry_run:
        validate_version_ids(candidates)
        log(f"Dry run, would delete: {' '.join(candidates)}")
        return len(candidates)

    count = delete_batched(
        candidates,
        options.batch_size,
        partial(runner.delete_versions, policy.project, policy.service),
        log=log,
    )

    # If deletions were requested but none completed, fail.
    if count == 0:
        raise PurgeFailedError(requested=len(candidates), deleted=count)
    if count < len(candidates):
        logger.warning("Deleted %d of %d candidate versions", count, len(candidates))
    return count


__all__ = [
    "PurgeOptions",
    "load_purge_options",
    "purge_old_versions",
]
