"""gcloud CLI adapter for listing and deleting App Engine versions.

The purge only talks to App Engine through two capabilities:

- :class:`VersionLister`: return the raw JSON listing for a service
- :class:`VersionDeleter`: delete a batch of versions and report the outcome

:class:`GcloudCliRunner` implements both by shelling out to ``gcloud`` with
fixed timeouts. Tests substitute in-memory fakes implementing the protocols.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .errors import VersionListError

logger = logging.getLogger(__name__)

# Environment variable overriding the gcloud executable
GCLOUD_BIN_ENV = "GAE_PURGE_GCLOUD"
DEFAULT_GCLOUD_BIN = "gcloud"

DEFAULT_LIST_TIMEOUT_SEC: float = 20.0
# Deleting is slow, so each batch gets a longer budget
DEFAULT_DELETE_TIMEOUT_SEC: float = 60.0

# Return code reported when gcloud could not be run or timed out
FAILED_TO_RUN_RETURNCODE = -1


@dataclass(frozen=True)
class GcloudResult:
    """Result of a gcloud command execution.

    Attributes:
        returncode: Exit code from the process, -1 if it never completed.
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        command: The full command that was executed.
    """

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        """Return True if the command succeeded (exit code 0)."""
        return self.returncode == 0

    @property
    def payload(self) -> Any:
        """Standard output decoded as JSON, or None if it is not JSON."""
        if not self.stdout.strip():
            return None
        try:
            return json.loads(self.stdout)
        except json.JSONDecodeError:
            return None


@runtime_checkable
class VersionLister(Protocol):
    def list_versions(self, project: str, service: str) -> list[dict[str, Any]]:
        """Return gcloud's JSON listing of versions for one service.

        Raises:
            VersionListError: If the listing cannot be produced.
        """
        ...


@runtime_checkable
class VersionDeleter(Protocol):
    def delete_versions(self, project: str, service: str, version_ids: Sequence[str]) -> GcloudResult:
        """Delete the given versions in a single call.

        Failures, timeouts included, are reported through the result rather
        than raised.
        """
        ...


@runtime_checkable
class VersionManager(VersionLister, VersionDeleter, Protocol):
    """Both capabilities, as needed by a full purge run."""


def build_list_command(gcloud_bin: str, project: str, service: str) -> list[str]:
    return [
        gcloud_bin,
        "app",
        "--project",
        project,
        "versions",
        "list",
        "--service",
        service,
        "--format=json",
    ]


def build_delete_command(
    gcloud_bin: str,
    project: str,
    service: str,
    version_ids: Sequence[str],
) -> list[str]:
    return [
        gcloud_bin,
        "app",
        "--project",
        project,
        "versions",
        "delete",
        *version_ids,
        "--service",
        service,
        "--format=json",
        "--quiet",
    ]


class GcloudCliRunner:
    """Runs gcloud as a blocking subprocess.

    Example:
        >>> runner = GcloudCliRunner()
        >>> entries = runner.list_versions("my-project", "default")
        >>> result = runner.delete_versions("my-project", "default", ["v1", "v2"])
    """

    def __init__(
        self,
        gcloud_bin: str | None = None,
        *,
        list_timeout: float = DEFAULT_LIST_TIMEOUT_SEC,
        delete_timeout: float = DEFAULT_DELETE_TIMEOUT_SEC,
    ) -> None:
        self.gcloud_bin = gcloud_bin or os.environ.get(GCLOUD_BIN_ENV) or DEFAULT_GCLOUD_BIN
        self.list_timeout = list_timeout
        self.delete_timeout = delete_timeout

    def _run(self, cmd: list[str], timeout: float) -> GcloudResult:
        logger.debug("Running %s", " ".join(cmd))
        try:
            completed = subprocess.run(
                cmd,
                input="",
                capture_output=True,
                text=True,
                check=False,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return GcloudResult(
                returncode=FAILED_TO_RUN_RETURNCODE,
                stderr=f"gcloud timed out after {timeout} seconds",
                command=tuple(cmd),
            )
        except OSError as e:
            return GcloudResult(
                returncode=FAILED_TO_RUN_RETURNCODE,
                stderr=f"gcloud could not be started: {e}",
                command=tuple(cmd),
            )
        return GcloudResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            command=tuple(cmd),
        )

    def list_versions(self, project: str, service: str) -> list[dict[str, Any]]:
        cmd = build_list_command(self.gcloud_bin, project, service)
        result = self._run(cmd, self.list_timeout)
        if not result.success:
            raise VersionListError(
                f"could not list versions: {result.returncode}",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        try:
            entries = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise VersionListError(f"could not parse version listing: {e}") from e
        if not isinstance(entries, list):
            raise VersionListError(f"version listing is not a JSON list: {type(entries).__name__}")

        logger.debug("Listed %d versions for %s/%s", len(entries), project, service)
        return entries

    def delete_versions(self, project: str, service: str, version_ids: Sequence[str]) -> GcloudResult:
        cmd = build_delete_command(self.gcloud_bin, project, service, version_ids)
        result = self._run(cmd, self.delete_timeout)
        if result.stderr:
            logger.info("gcloud: %s", result.stderr.rstrip())
        if result.success:
            logger.info("Deleted versions: %s", result.payload)
        return result


__all__ = [
    "DEFAULT_DELETE_TIMEOUT_SEC",
    "DEFAULT_GCLOUD_BIN",
    "DEFAULT_LIST_TIMEOUT_SEC",
    "FAILED_TO_RUN_RETURNCODE",
    "GCLOUD_BIN_ENV",
    "GcloudCliRunner",
    "GcloudResult",
    "VersionDeleter",
    "VersionLister",
    "VersionManager",
    "build_delete_command",
    "build_list_command",
]
