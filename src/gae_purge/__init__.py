"""gae-purge: retention-driven cleanup of deployed App Engine versions.

Versions of one service are listed with ``gcloud``, classified under a
retention policy, and the unprotected ones are deleted a few at a time.

Public API
----------
- :func:`purge_old_versions` - List, classify and delete in one run
- :func:`classify` - Partition version records into kept and deletable
- :func:`delete_batched` - Delete validated ids in sequential batches
- :func:`load_purge_options` - Read :class:`PurgeOptions` from YAML

Example
-------
>>> from gae_purge import PurgeOptions, purge_old_versions
>>> purge_old_versions(PurgeOptions(project="my-project", keep_minimum=10))
"""

from __future__ import annotations

from gae_purge.classify import Classification, VersionDecision, classify
from gae_purge.deleter import DELETE_BATCH_SIZE, delete_batched, validate_version_ids
from gae_purge.errors import (
    InvalidVersionIdError,
    PurgeConfigError,
    PurgeError,
    PurgeFailedError,
    VersionListError,
    VersionParseError,
)
from gae_purge.gcloud import (
    GcloudCliRunner,
    GcloudResult,
    VersionDeleter,
    VersionLister,
    VersionManager,
)
from gae_purge.policy import RetentionPolicy
from gae_purge.purge import PurgeOptions, load_purge_options, purge_old_versions
from gae_purge.versions import VersionRecord, parse_version_records

__all__ = [
    # Entry points
    "purge_old_versions",
    "load_purge_options",
    "PurgeOptions",
    # Core
    "classify",
    "delete_batched",
    "validate_version_ids",
    "DELETE_BATCH_SIZE",
    # Types
    "Classification",
    "RetentionPolicy",
    "VersionDecision",
    "VersionRecord",
    "parse_version_records",
    # gcloud adapter
    "GcloudCliRunner",
    "GcloudResult",
    "VersionDeleter",
    "VersionLister",
    "VersionManager",
    # Errors
    "InvalidVersionIdError",
    "PurgeConfigError",
    "PurgeError",
    "PurgeFailedError",
    "VersionListError",
    "VersionParseError",
]
