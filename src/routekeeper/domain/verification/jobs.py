"""Verification job state machine and progress snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from routekeeper.domain.errors import InvalidTransitionError

type JobId = int | str


class JobState(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL: Final = frozenset({JobState.SUCCEEDED, JobState.FAILED, JobState.CANCELLED})

_TRANSITIONS: Final[dict[JobState, frozenset[JobState]]] = {
    JobState.PENDING: frozenset({JobState.RUNNING, JobState.CANCELLED}),
    JobState.RUNNING: frozenset({JobState.SUCCEEDED, JobState.FAILED}),
    JobState.SUCCEEDED: frozenset(),
    JobState.FAILED: frozenset(),
    JobState.CANCELLED: frozenset(),
}


@dataclass(slots=True)
class VerificationJob:
    job_id: JobId
    state: JobState = JobState.PENDING
    error: str | None = None

    def transition(self, target: JobState, *, error: str | None = None) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Job {self.job_id!r} cannot move from {self.state} to {target}"
            )
        self.state = target
        self.error = error if target is JobState.FAILED else None


@dataclass(frozen=True, slots=True)
class BatchProgress:
    """Immutable view of a batch run published after every state transition."""

    total: int
    succeeded: int
    failed: int
    testing: int
    cancelled: int = 0
    finished: bool = False

    @property
    def completed(self) -> int:
        return self.succeeded + self.failed

    @property
    def pending(self) -> int:
        return self.total - self.completed - self.testing - self.cancelled
