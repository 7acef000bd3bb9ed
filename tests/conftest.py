# SPDX-License-Identifier: MIT
"""Pytest configuration and shared fixtures for the purge test suite.

This module provides:
- Deterministic test environment setup
- Factories for gcloud listing entries and parsed version records
- An in-memory fake of the gcloud runner
"""
from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

import pytest

from gae_purge.gcloud import GcloudResult
from gae_purge.versions import VersionRecord

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PROJECT = "demo-project"
SERVICE = "default"
NOW = datetime(2024, 3, 10, 18, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Environment Setup
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest environment for determinism."""
    deterministic_env = {
        "LC_ALL": "C",
        "LANG": "C",
        "TZ": "UTC",
        "PYTHONHASHSEED": "0",
    }
    for key, value in deterministic_env.items():
        os.environ.setdefault(key, value)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeVersionManager:
    """In-memory stand-in for GcloudCliRunner.

    ``delete_returncodes`` is consumed one entry per delete call; once it is
    exhausted every further call succeeds.
    """

    def __init__(
        self,
        entries: list[dict[str, Any]] | None = None,
        delete_returncodes: Sequence[int] = (),
        list_error: Exception | None = None,
    ) -> None:
        self.entries = entries or []
        self.delete_returncodes = list(delete_returncodes)
        self.list_error = list_error
        self.list_calls: list[tuple[str, str]] = []
        self.delete_calls: list[tuple[str, str, list[str]]] = []

    def list_versions(self, project: str, service: str) -> list[dict[str, Any]]:
        self.list_calls.append((project, service))
        if self.list_error is not None:
            raise self.list_error
        return self.entries

    def delete_versions(self, project: str, service: str, version_ids: Sequence[str]) -> GcloudResult:
        self.delete_calls.append((project, service, list(version_ids)))
        returncode = self.delete_returncodes.pop(0) if self.delete_returncodes else 0
        return GcloudResult(returncode=returncode, stdout="[]" if returncode == 0 else "")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def now() -> datetime:
    """Reference time for classification: 2024-03-10 18:00 UTC."""
    return NOW


@pytest.fixture
def make_entry() -> Callable[..., dict[str, Any]]:
    """Factory for entries shaped like ``gcloud app versions list`` JSON."""

    def _make(
        version_id: str,
        deployed: str,
        *,
        project: str = PROJECT,
        service: str = SERVICE,
        traffic_split: float | None = 0.0,
        disk_usage: str | None = "1048576",
    ) -> dict[str, Any]:
        version: dict[str, Any] = {"id": version_id, "servingStatus": "SERVING"}
        if disk_usage is not None:
            version["diskUsageBytes"] = disk_usage
        entry: dict[str, Any] = {
            "environment": {"name": "STANDARD"},
            "id": version_id,
            "last_deployed_time": {"datetime": deployed},
            "project": project,
            "service": service,
            "version": version,
        }
        if traffic_split is not None:
            entry["traffic_split"] = traffic_split
        return entry

    return _make


@pytest.fixture
def make_record() -> Callable[..., VersionRecord]:
    """Factory for parsed VersionRecord values."""

    def _make(
        version_id: str,
        deployed: datetime,
        *,
        project: str = PROJECT,
        service: str = SERVICE,
        traffic_split: float | None = 0.0,
        disk_usage_bytes: int = 0,
    ) -> VersionRecord:
        return VersionRecord(
            id=version_id,
            project=project,
            service=service,
            traffic_split=traffic_split,
            disk_usage_bytes=disk_usage_bytes,
            last_deployed=deployed,
        )

    return _make


@pytest.fixture
def fake_manager() -> Callable[..., FakeVersionManager]:
    """Factory for FakeVersionManager instances."""
    return FakeVersionManager
