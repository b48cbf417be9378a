"""Caller-owned console state.

The core keeps no UI state of its own. A session value is passed into
coordinator operations and a new value comes back; nothing is mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from routekeeper.domain.verification import BatchRun, JobId, Selection


@dataclass(frozen=True, slots=True)
class ConsoleSession:
    view: frozenset[JobId] | None = None
    run: BatchRun | None = None
    selection: Selection | None = None

    def with_view(self, job_ids: Iterable[JobId] | None) -> ConsoleSession:
        view = None if job_ids is None else frozenset(job_ids)
        return replace(self, view=view, selection=None)

    def with_run(self, run: BatchRun | None) -> ConsoleSession:
        return replace(self, run=run, selection=None)
