"""Batched deletion of versions.

Ids are validated up front, then deleted a few at a time because each gcloud
deletion call is slow. Batches run strictly in order; the first failed batch
ends the run and the number of versions deleted so far is returned.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .errors import InvalidVersionIdError
from .formatting import LogSink, discard_log
from .gcloud import GcloudResult

# Deleting is slow, so do a chunk at a time
DELETE_BATCH_SIZE = 4

DeleteFn = Callable[[list[str]], GcloudResult]


def validate_version_id(version_id: object) -> str:
    """Reject ids that gcloud could read as a flag or an escape sequence."""
    if not isinstance(version_id, str) or version_id.startswith("-") or "\\" in version_id:
        raise InvalidVersionIdError(version_id)
    return version_id


def validate_version_ids(version_ids: Sequence[object]) -> list[str]:
    """Validate every id before any of them is used.

    Raises:
        InvalidVersionIdError: On the first unsafe id.
    """
    return [validate_version_id(version_id) for version_id in version_ids]


def split_batches(items: Sequence[str], batch_size: int) -> list[list[str]]:
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]


def delete_batched(
    version_ids: Sequence[object],
    batch_size: int,
    delete_fn: DeleteFn,
    *,
    log: LogSink | None = None,
) -> int:
    """Delete versions in consecutive batches.

    Args:
        version_ids: Ids to delete, in order.
        batch_size: Maximum ids per deletion call.
        delete_fn: Deletes one batch and reports the outcome.
        log: Optional sink for progress lines.

    Returns:
        Number of versions in batches that completed successfully.

    Raises:
        InvalidVersionIdError: If any id is unsafe; no call is made.
        ValueError: If ``batch_size`` is less than 1.
    """
    emit = log or discard_log
    batches = split_batches(validate_version_ids(version_ids), batch_size)

    done = 0
    for batch in batches:
        emit(f"Enacting deletion for versions: {' '.join(batch)}")
        result = delete_fn(batch)
        if not result.success:
            emit(f"Could not delete versions: {result.returncode}")
            break
        done += len(batch)
    return done


__all__ = [
    "DELETE_BATCH_SIZE",
    "DeleteFn",
    "delete_batched",
    "split_batches",
    "validate_version_id",
    "validate_version_ids",
]
