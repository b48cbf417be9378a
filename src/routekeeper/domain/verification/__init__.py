"""Verification of associations through bounded-concurrency remote test calls."""

from __future__ import annotations

from .jobs import BatchProgress, JobId, JobState, VerificationJob
from .scheduler import (
    DEFAULT_CONCURRENCY_LIMIT,
    BatchRun,
    CancellationToken,
    VerificationScheduler,
    association_job,
    provider_model_job,
)
from .selection import (
    BulkAction,
    BulkActionResult,
    BulkFailure,
    Selection,
    SelectionCoordinator,
    clear,
    select_by_outcome,
)

__all__ = [
    "DEFAULT_CONCURRENCY_LIMIT",
    "BatchProgress",
    "BatchRun",
    "BulkAction",
    "BulkActionResult",
    "BulkFailure",
    "CancellationToken",
    "JobId",
    "JobState",
    "Selection",
    "SelectionCoordinator",
    "VerificationJob",
    "VerificationScheduler",
    "association_job",
    "clear",
    "provider_model_job",
    "select_by_outcome",
]
