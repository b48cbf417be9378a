"""Turn verification outcomes into selections for bulk follow-up actions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from routekeeper.domain.errors import RunInProgressError

from .jobs import JobId, JobState

if TYPE_CHECKING:
    from collections.abc import Collection

    from routekeeper.domain.ports import CatalogStore
    from routekeeper.domain.session import ConsoleSession

    from .scheduler import BatchRun

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Selection:
    outcome: JobState
    job_ids: tuple[JobId, ...] = ()
    notice: str | None = None

    def __len__(self) -> int:
        return len(self.job_ids)

    def __bool__(self) -> bool:
        return bool(self.job_ids)


def select_by_outcome(
    run: BatchRun,
    outcome: JobState,
    view: Collection[JobId] | None = None,
) -> Selection:
    """Job ids of ``run`` in state ``outcome``, limited to the caller's active view.

    Ids outside ``view`` are excluded even when they were tested. An empty match
    is reported through ``notice`` rather than an error.
    """

    job_ids = tuple(
        job_id for job_id in run.job_ids(outcome) if view is None or job_id in view
    )
    if job_ids:
        return Selection(outcome=outcome, job_ids=job_ids)
    return Selection(outcome=outcome, notice=f"No {outcome} jobs in the current view")


def clear(run: BatchRun) -> None:
    """Forget every job state and counter of a finished run; stored records are untouched."""

    if not run.finished:
        raise RunInProgressError(f"Verification run {run.run_id} is still in progress")
    run.reset()


class BulkAction(StrEnum):
    ENABLE = "enable"
    DISABLE = "disable"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class BulkFailure:
    job_id: JobId
    message: str


@dataclass(slots=True)
class BulkActionResult:
    action: BulkAction
    requested: int = 0
    affected: int = 0
    failures: list[BulkFailure] = field(default_factory=list[BulkFailure])


@dataclass(slots=True)
class SelectionCoordinator:
    """Apply enable/disable/delete to association ids picked from a verification run."""

    store: CatalogStore

    def select(self, session: ConsoleSession, outcome: JobState) -> ConsoleSession:
        """Return ``session`` with its selection replaced by ``outcome`` jobs in its view."""

        if session.run is None:
            return replace(
                session,
                selection=Selection(outcome=outcome, notice="No verification run to select from"),
            )
        return replace(session, selection=select_by_outcome(session.run, outcome, session.view))

    def retry_ids(self, run: BatchRun, view: Collection[JobId] | None = None) -> tuple[JobId, ...]:
        """Failed job ids, ready to be passed to a fresh ``start``."""
        return select_by_outcome(run, JobState.FAILED, view).job_ids

    def enable(self, selection: Selection) -> BulkActionResult:
        return self._set_enabled(selection, enabled=True)

    def disable(self, selection: Selection) -> BulkActionResult:
        return self._set_enabled(selection, enabled=False)

    def delete(self, selection: Selection) -> BulkActionResult:
        result = BulkActionResult(action=BulkAction.DELETE, requested=len(selection))
        ids = self._association_ids(selection, result)
        if not ids:
            return result
        try:
            result.affected = self.store.batch_delete_associations(ids)
        except Exception as exc:  # noqa: BLE001
            log.warning("Bulk delete of %s associations failed: %s", len(ids), exc)
            result.failures.extend(BulkFailure(job_id=job_id, message=str(exc)) for job_id in ids)
        return result

    def _set_enabled(self, selection: Selection, *, enabled: bool) -> BulkActionResult:
        action = BulkAction.ENABLE if enabled else BulkAction.DISABLE
        result = BulkActionResult(action=action, requested=len(selection))
        for association_id in self._association_ids(selection, result):
            try:
                self.store.set_association_enabled(association_id, enabled)
            except Exception as exc:  # noqa: BLE001
                log.warning("Failed to %s association %s: %s", action, association_id, exc)
                result.failures.append(BulkFailure(job_id=association_id, message=str(exc)))
                continue
            result.affected += 1
        return result

    @staticmethod
    def _association_ids(selection: Selection, result: BulkActionResult) -> list[int]:
        ids: list[int] = []
        for job_id in selection.job_ids:
            if isinstance(job_id, int):
                ids.append(job_id)
            else:
                result.failures.append(
                    BulkFailure(job_id=job_id, message="Not an association id")
                )
        return ids
