"""Apply a previously computed preview to the store.

Each item succeeds or fails on its own. Targets that vanished (or pairs that
appeared) between preview and apply are skipped and counted as stale.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from routekeeper.domain.errors import StalePreviewError
from routekeeper.domain.model import AssociationDefaults

from .plan import ApplyResult, ItemFailure

if TYPE_CHECKING:
    from routekeeper.domain.ports import CatalogStore

    from .plan import AdditionCandidate, ReconciliationPreview, RemovalCandidate

log = getLogger(__name__)


def apply_preview(
    store: CatalogStore,
    preview: ReconciliationPreview,
    *,
    defaults: AssociationDefaults | None = None,
) -> ApplyResult:
    result = ApplyResult()
    if preview.is_empty:
        return result

    effective_defaults = defaults or AssociationDefaults()
    current = tuple(store.list_associations())
    current_ids = {association.id for association in current}
    current_pairs = {association.pair_key for association in current}

    for candidate in preview.additions:
        if candidate.pair_key in current_pairs:
            result.stale_skipped += 1
            continue
        _apply_addition(store, candidate, effective_defaults, result)

    for removal in preview.removals:
        if removal.association_id not in current_ids:
            result.stale_skipped += 1
            continue
        _apply_removal(store, removal, result)

    log.info(
        "Applied preview: added=%s, removed=%s, stale_skipped=%s, failed=%s",
        result.added,
        result.removed,
        result.stale_skipped,
        result.failed,
    )
    return result


def _apply_addition(
    store: CatalogStore,
    candidate: AdditionCandidate,
    defaults: AssociationDefaults,
    result: ApplyResult,
) -> None:
    spec = defaults.spec_for(
        model_id=candidate.model_id,
        provider_id=candidate.provider_id,
        provider_model=candidate.provider_model,
    )
    try:
        created = store.create_association(spec)
    except Exception as exc:  # noqa: BLE001
        log.warning(
            "Failed to create association %s -> %s/%s: %s",
            candidate.model_name,
            candidate.provider_name,
            candidate.provider_model,
            exc,
        )
        result.failures.append(ItemFailure(item=candidate, message=str(exc)))
        return
    result.created.append(created)
    result.added += 1


def _apply_removal(store: CatalogStore, removal: RemovalCandidate, result: ApplyResult) -> None:
    try:
        store.delete_association(removal.association_id)
    except StalePreviewError:
        result.stale_skipped += 1
        return
    except Exception as exc:  # noqa: BLE001
        log.warning("Failed to delete association %s: %s", removal.association_id, exc)
        result.failures.append(ItemFailure(item=removal, message=str(exc)))
        return
    result.removed += 1
