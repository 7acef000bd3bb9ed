"""Exception hierarchy for the version purge.

Every failure that aborts a purge run derives from :class:`PurgeError` so
callers can catch one type. A later batch failing after earlier batches
succeeded is not an error and never raises.
"""

from __future__ import annotations


class PurgeError(Exception):
    """Base exception for purge errors."""


class VersionListError(PurgeError):
    """Raised when the deployed versions cannot be listed."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class VersionParseError(PurgeError):
    """Raised when a listed version entry cannot be parsed."""


class InvalidVersionIdError(PurgeError, ValueError):
    """Raised when a version id is unsafe to pass to gcloud."""

    def __init__(self, version_id: object) -> None:
        self.version_id = version_id
        super().__init__(f"bad version: {version_id!r}")


class PurgeFailedError(PurgeError):
    """Raised when deletions were requested but none completed."""

    def __init__(self, requested: int, deleted: int = 0) -> None:
        self.requested = requested
        self.deleted = deleted
        super().__init__(f"Deleted {deleted} of {requested} versions with error")


class PurgeConfigError(PurgeError, ValueError):
    """Raised when purge options cannot be loaded."""


__all__ = [
    "InvalidVersionIdError",
    "PurgeConfigError",
    "PurgeError",
    "PurgeFailedError",
    "VersionListError",
    "VersionParseError",
]
