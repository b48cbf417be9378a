"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from routekeeper.adapters.gateway import GatewayStore, GatewayVerifier
from routekeeper.adapters.sqlalchemy import SqlAlchemyConsoleStore, is_started, startup
from routekeeper.config import get_console_settings, get_gateway_config
from routekeeper.domain.errors import NotFoundError, ValidationError
from routekeeper.domain.model import AssociationDefaults, AssociationSpec, Capabilities
from routekeeper.domain.reconciliation import ReconciliationEngine, ReconciliationPolicy
from routekeeper.domain.session import ConsoleSession
from routekeeper.domain.templates import TemplateService
from routekeeper.domain.verification import (
    JobState,
    SelectionCoordinator,
    VerificationScheduler,
    association_job,
    provider_model_job,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from routekeeper.config import ConsoleSettings
    from routekeeper.domain.model import Association, ModelTemplate
    from routekeeper.domain.ports import ConsoleStore, Verifier
    from routekeeper.domain.reconciliation import (
        ApplyResult,
        AutoActionResult,
        AutoTrigger,
        ReconciliationPreview,
    )
    from routekeeper.domain.verification import (
        BatchProgress,
        BatchRun,
        BulkActionResult,
        CancellationToken,
        JobId,
    )
    from routekeeper.domain.verification.scheduler import VerifyCall

type Backend = Literal["gateway", "sqlite"]
type ReconcileMode = Literal["associate", "clean", "all"]

log = getLogger(__name__)


def build_store(backend: Backend = "gateway") -> ConsoleStore:
    """Create the store for ``backend`` from environment configuration."""

    if backend == "gateway":
        return GatewayStore(config=get_gateway_config())
    if backend == "sqlite":
        if not is_started():
            startup()
        return SqlAlchemyConsoleStore()
    raise ValueError(f"Unsupported backend: {backend}")


def policy_from_settings(settings: ConsoleSettings) -> ReconciliationPolicy:
    return ReconciliationPolicy(
        defaults=AssociationDefaults(
            weight=settings.default_weight,
            priority=settings.default_priority,
        ),
        prune_empty_catalogs=settings.prune_empty_catalogs,
        auto_associate_on_add=settings.auto_associate_on_add,
        auto_clean_on_delete=settings.auto_clean_on_delete,
    )


def build_engine(
    store: ConsoleStore,
    settings: ConsoleSettings | None = None,
) -> ReconciliationEngine:
    return ReconciliationEngine(
        store=store,
        policy=policy_from_settings(settings or get_console_settings()),
    )


# reconciliation -----------------------------------------------------------


def preview_reconciliation(
    *,
    store: ConsoleStore | None = None,
    settings: ConsoleSettings | None = None,
) -> ReconciliationPreview:
    engine = build_engine(store or build_store(), settings)
    preview = engine.preview()
    log.info(
        f"Reconciliation preview: additions={preview.add_count}, removals={preview.remove_count}"
    )
    return preview


def apply_reconciliation(
    mode: ReconcileMode = "all",
    *,
    store: ConsoleStore | None = None,
    settings: ConsoleSettings | None = None,
) -> ApplyResult:
    """Recompute a fresh preview for ``mode`` and apply it."""

    engine = build_engine(store or build_store(), settings)
    if mode == "associate":
        return engine.auto_associate()
    if mode == "clean":
        return engine.clean_invalid()
    return engine.apply(engine.preview())


def add_association(
    model_id: int,
    provider_id: int,
    provider_model: str,
    *,
    weight: int | None = None,
    priority: int | None = None,
    capabilities: Capabilities | None = None,
    store: ConsoleStore | None = None,
    settings: ConsoleSettings | None = None,
) -> Association:
    """Create one association by hand. No automatic reconciliation follows."""

    resolved_store = store or build_store()
    defaults = policy_from_settings(settings or get_console_settings()).defaults
    spec = AssociationSpec(
        model_id=model_id,
        provider_id=provider_id,
        provider_model=provider_model.strip(),
        capabilities=capabilities or defaults.capabilities,
        weight=defaults.weight if weight is None else weight,
        priority=defaults.priority if priority is None else priority,
    )
    association = resolved_store.create_association(spec)
    log.info(f"Created association {association.id} for model {model_id}")
    return association


def remove_association(association_id: int, *, store: ConsoleStore | None = None) -> None:
    (store or build_store()).delete_association(association_id)
    log.info(f"Deleted association {association_id}")


def run_auto_actions(
    trigger: AutoTrigger,
    *,
    models_added: bool = False,
    models_removed: bool = False,
    store: ConsoleStore | None = None,
    settings: ConsoleSettings | None = None,
) -> AutoActionResult:
    """Reconcile after a provider or its catalog changed, as far as settings allow."""

    engine = build_engine(store or build_store(), settings)
    result = engine.run_auto_actions(
        trigger, models_added=models_added, models_removed=models_removed
    )
    if not result.ran:
        log.info(f"No automatic follow-up enabled for {trigger}")
    return result


# templates ----------------------------------------------------------------


def show_template(model_id: int, *, store: ConsoleStore | None = None) -> ModelTemplate:
    return TemplateService(store or build_store()).get_template(model_id)


def add_template_alias(
    model_id: int, alias: str, *, store: ConsoleStore | None = None
) -> ModelTemplate:
    return TemplateService(store or build_store()).add_manual_alias(model_id, alias)


def remove_template_alias(
    model_id: int, alias: str, *, store: ConsoleStore | None = None
) -> ModelTemplate:
    return TemplateService(store or build_store()).remove_manual_alias(model_id, alias)


# verification -------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VerificationReport:
    run: BatchRun
    progress: BatchProgress
    errors: dict[JobId, str]
    disabled: BulkActionResult | None = None


def verify_associations(
    *,
    model_id: int | None = None,
    store: ConsoleStore | None = None,
    verifier: Verifier | None = None,
    concurrency: int | None = None,
    disable_failed: bool = False,
    token: CancellationToken | None = None,
    settings: ConsoleSettings | None = None,
) -> VerificationReport:
    """Test every association (optionally of one model) with bounded concurrency.

    With ``disable_failed`` the failed associations are disabled once the run
    has finished.
    """

    resolved_store = store or build_store()
    association_ids = [item.id for item in resolved_store.list_associations(model_id)]
    report = _run_verification(
        association_job,
        association_ids,
        verifier=verifier,
        concurrency=concurrency,
        token=token,
        settings=settings,
    )
    if not disable_failed:
        return report

    coordinator = SelectionCoordinator(resolved_store)
    session = ConsoleSession(view=frozenset(association_ids), run=report.run)
    selection = coordinator.select(session, JobState.FAILED).selection
    if selection is None or not selection:
        log.info("No failed associations to disable")
        return report
    disabled = coordinator.disable(selection)
    log.info(f"Disabled {disabled.affected} of {disabled.requested} failed association(s)")
    return VerificationReport(
        run=report.run, progress=report.progress, errors=report.errors, disabled=disabled
    )


def verify_provider_models(
    provider_id: int,
    *,
    models: Iterable[str] | None = None,
    store: ConsoleStore | None = None,
    verifier: Verifier | None = None,
    concurrency: int | None = None,
    token: CancellationToken | None = None,
    settings: ConsoleSettings | None = None,
) -> VerificationReport:
    """Test provider-side model names directly, defaulting to the provider's whole catalog."""

    if models is None:
        resolved_store = store or build_store()
        provider = next(
            (item for item in resolved_store.list_providers() if item.id == provider_id), None
        )
        if provider is None:
            raise NotFoundError(f"Provider {provider_id} not found")
        models = provider.catalog.names
    return _run_verification(
        lambda resolved: provider_model_job(resolved, provider_id),
        list(models),
        verifier=verifier,
        concurrency=concurrency,
        token=token,
        settings=settings,
    )


def _run_verification(
    make_call: Callable[[Verifier], VerifyCall],
    job_ids: Sequence[JobId],
    *,
    verifier: Verifier | None,
    concurrency: int | None,
    token: CancellationToken | None,
    settings: ConsoleSettings | None,
) -> VerificationReport:
    limit = (
        concurrency
        if concurrency is not None
        else (settings or get_console_settings()).verify_concurrency
    )
    if limit < 1:
        raise ValidationError(f"Concurrency limit must be >= 1, got {limit}")

    async def run_all() -> BatchRun:
        if verifier is not None:
            scheduler = VerificationScheduler(make_call(verifier), concurrency_limit=limit)
            return await scheduler.run_batch(job_ids, token=token)
        async with GatewayVerifier(get_gateway_config()) as gateway_verifier:
            scheduler = VerificationScheduler(make_call(gateway_verifier), concurrency_limit=limit)
            return await scheduler.run_batch(job_ids, token=token)

    run = asyncio.run(run_all())
    progress = run.progress()
    log.info(
        f"Verification finished: total={progress.total}, succeeded={progress.succeeded}, "
        f"failed={progress.failed}, cancelled={progress.cancelled}"
    )
    return VerificationReport(run=run, progress=progress, errors=run.errors())
