"""Bounded-concurrency scheduler for remote verification calls.

Everything runs on one event loop. "Concurrency" means several verification
calls awaiting their results at the same time; all job and counter updates
happen synchronously between those awaits, so no locks are needed.

Admission is a sliding window: whenever a job completes, its slot is refilled
from the queue right away unless the run was cancelled. Cancellation only
stops admission. Calls already dispatched always run to completion and still
update the counters, so the run deterministically finishes once the in-flight
set is empty.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import uuid4

from routekeeper.domain.errors import RemoteCallError, ValidationError

from .jobs import BatchProgress, JobId, JobState, VerificationJob

if TYPE_CHECKING:
    from collections.abc import Iterable

    from routekeeper.domain.ports import Verifier

log = getLogger(__name__)

DEFAULT_CONCURRENCY_LIMIT = 3

type VerifyCall = Callable[[JobId], Awaitable[object]]
type ProgressListener = Callable[[BatchProgress], None]


class CancellationToken:
    """Explicit, cooperative cancellation flag shared between caller and scheduler."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass(eq=False, slots=True)
class BatchRun:
    """Handle for one invocation of :meth:`VerificationScheduler.start`."""

    concurrency_limit: int
    token: CancellationToken = field(default_factory=CancellationToken)
    run_id: str = field(default_factory=lambda: uuid4().hex)
    jobs: dict[JobId, VerificationJob] = field(default_factory=dict[JobId, VerificationJob])
    succeeded: int = 0
    failed: int = 0
    listeners: list[ProgressListener] = field(default_factory=list[ProgressListener])
    queue: deque[JobId] = field(default_factory=deque[JobId], repr=False)
    in_flight: set[JobId] = field(default_factory=set[JobId], repr=False)
    tasks: set[asyncio.Task[None]] = field(default_factory=set["asyncio.Task[None]"], repr=False)
    done_event: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def total(self) -> int:
        return len(self.jobs)

    @property
    def completed(self) -> int:
        return self.succeeded + self.failed

    @property
    def testing(self) -> int:
        return len(self.in_flight)

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    @property
    def finished(self) -> bool:
        return not self.in_flight and not self.queue

    def progress(self) -> BatchProgress:
        return BatchProgress(
            total=self.total,
            succeeded=self.succeeded,
            failed=self.failed,
            testing=self.testing,
            cancelled=sum(1 for job in self.jobs.values() if job.state is JobState.CANCELLED),
            finished=self.finished,
        )

    def job(self, job_id: JobId) -> VerificationJob:
        return self.jobs[job_id]

    def job_ids(self, state: JobState | None = None) -> tuple[JobId, ...]:
        """Job ids in submission order, optionally restricted to one state."""
        return tuple(
            job_id for job_id, job in self.jobs.items() if state is None or job.state is state
        )

    def errors(self) -> dict[JobId, str]:
        return {
            job_id: job.error
            for job_id, job in self.jobs.items()
            if job.state is JobState.FAILED and job.error is not None
        }

    def reset(self) -> None:
        """Drop every job state and counter. Only valid once the run is finished."""
        self.jobs.clear()
        self.succeeded = 0
        self.failed = 0


class VerificationScheduler:
    """Run verification calls over a job list with at most ``concurrency_limit`` in flight."""

    def __init__(
        self,
        verify: VerifyCall,
        *,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
        listeners: Iterable[ProgressListener] = (),
    ) -> None:
        _check_limit(concurrency_limit)
        self._verify = verify
        self.concurrency_limit = concurrency_limit
        self._listeners = tuple(listeners)

    def start(
        self,
        job_ids: Iterable[JobId],
        *,
        concurrency_limit: int | None = None,
        token: CancellationToken | None = None,
        listener: ProgressListener | None = None,
    ) -> BatchRun:
        """Queue ``job_ids`` and dispatch the first wave before returning.

        Must be called from inside a running event loop. Duplicate ids are
        submitted once.
        """

        limit = self.concurrency_limit if concurrency_limit is None else concurrency_limit
        _check_limit(limit)
        run = BatchRun(concurrency_limit=limit, token=token or CancellationToken())
        run.listeners.extend(self._listeners)
        if listener is not None:
            run.listeners.append(listener)
        for job_id in job_ids:
            if job_id in run.jobs:
                continue
            run.jobs[job_id] = VerificationJob(job_id=job_id)
            run.queue.append(job_id)

        log.info(
            "Starting verification run %s: jobs=%s, concurrency=%s",
            run.run_id,
            run.total,
            limit,
        )
        self._publish(run)
        self._admit(run)
        return run

    def cancel(self, run: BatchRun) -> None:
        """Stop admitting new jobs; in-flight calls keep running to completion."""

        if run.finished or (run.token.cancelled and not run.queue):
            return
        run.token.cancel()
        log.info("Cancelling verification run %s (%s in flight)", run.run_id, run.testing)
        self._admit(run)

    def progress(self, run: BatchRun) -> BatchProgress:
        return run.progress()

    async def wait(self, run: BatchRun) -> BatchProgress:
        await run.done_event.wait()
        return run.progress()

    async def run_batch(
        self,
        job_ids: Iterable[JobId],
        *,
        concurrency_limit: int | None = None,
        token: CancellationToken | None = None,
        listener: ProgressListener | None = None,
    ) -> BatchRun:
        run = self.start(
            job_ids, concurrency_limit=concurrency_limit, token=token, listener=listener
        )
        await self.wait(run)
        return run

    # Scheduling decision point -------------------------------------------------

    def _admit(self, run: BatchRun) -> None:
        if run.token.cancelled:
            self._cancel_queued(run)
        else:
            loop = asyncio.get_running_loop()
            while run.queue and len(run.in_flight) < run.concurrency_limit:
                job = run.jobs[run.queue.popleft()]
                job.transition(JobState.RUNNING)
                run.in_flight.add(job.job_id)
                task = loop.create_task(self._execute(run, job))
                run.tasks.add(task)
                task.add_done_callback(run.tasks.discard)
                self._publish(run)
        self._maybe_finish(run)

    def _cancel_queued(self, run: BatchRun) -> None:
        queue = run.queue
        if not queue:
            return
        while queue:
            run.jobs[queue.popleft()].transition(JobState.CANCELLED)
        self._publish(run)

    def _maybe_finish(self, run: BatchRun) -> None:
        done = run.done_event
        if run.finished and not done.is_set():
            done.set()
            log.info(
                "Verification run %s finished: succeeded=%s, failed=%s, cancelled=%s",
                run.run_id,
                run.succeeded,
                run.failed,
                run.cancelled,
            )

    async def _execute(self, run: BatchRun, job: VerificationJob) -> None:
        try:
            await self._verify(job.job_id)
        except RemoteCallError as exc:
            self._settle(run, job, error=str(exc) or type(exc).__name__)
        except asyncio.CancelledError:
            # the loop is tearing down; admit nothing more so queued jobs end cancelled
            run.token.cancel()
            self._settle(run, job, error="Verification call was interrupted")
            raise
        except Exception as exc:  # noqa: BLE001
            self._settle(run, job, error=f"{type(exc).__name__}: {exc}")
        else:
            self._settle(run, job, error=None)

    def _settle(self, run: BatchRun, job: VerificationJob, *, error: str | None) -> None:
        run.in_flight.discard(job.job_id)
        if error is None:
            job.transition(JobState.SUCCEEDED)
            run.succeeded += 1
        else:
            job.transition(JobState.FAILED, error=error)
            run.failed += 1
            log.warning("Verification of %r failed: %s", job.job_id, error)
        self._publish(run)
        self._admit(run)

    def _publish(self, run: BatchRun) -> None:
        if not run.listeners:
            return
        snapshot = run.progress()
        for listener in run.listeners:
            try:
                listener(snapshot)
            except Exception:
                log.exception("Progress listener failed for run %s", run.run_id)


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValidationError(f"Concurrency limit must be >= 1, got {limit}")


def association_job(verifier: Verifier) -> VerifyCall:
    """Verify call whose job ids are association ids."""

    async def verify(job_id: JobId) -> None:
        if not isinstance(job_id, int):
            raise RemoteCallError(f"Job id {job_id!r} is not an association id")
        await verifier.verify_association(job_id)

    return verify


def provider_model_job(verifier: Verifier, provider_id: int) -> VerifyCall:
    """Verify call whose job ids are model names of one provider's catalog."""

    async def verify(job_id: JobId) -> None:
        await verifier.verify_model(provider_id, str(job_id))

    return verify
