"""Pure diff computations over a catalog snapshot."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from routekeeper.domain.templates import TemplateIndex

from .plan import AdditionCandidate, ReconciliationPreview, RemovalCandidate, RemovalReason

if TYPE_CHECKING:
    from routekeeper.domain.snapshot import CatalogSnapshot

log = getLogger(__name__)


def compute_preview_additions(
    snapshot: CatalogSnapshot,
    *,
    index: TemplateIndex | None = None,
) -> ReconciliationPreview:
    """Propose associations for catalog entries that match a model template.

    Entries are visited in provider order, then catalog order; the result keeps
    that order. An entry whose lower-cased ``(provider_id, name)`` pair is already
    associated is never proposed, whichever model owns the existing association.
    """

    template_index = index or TemplateIndex.from_snapshot(snapshot)
    models = snapshot.models_by_id()
    existing = snapshot.existing_pairs()
    proposed: set[tuple[int, int, str]] = set()
    additions: list[AdditionCandidate] = []

    for provider in snapshot.providers:
        for entry in provider.catalog:
            if (provider.id, entry.name.lower()) in existing:
                continue
            for model_id in template_index.match(entry.name):
                model = models.get(model_id)
                if model is None:
                    continue
                candidate = AdditionCandidate(
                    model_id=model.id,
                    model_name=model.name,
                    provider_id=provider.id,
                    provider_name=provider.name,
                    provider_model=entry.name,
                )
                if candidate.key in proposed:
                    continue
                proposed.add(candidate.key)
                additions.append(candidate)

    log.debug("Computed %s addition candidates", len(additions))
    return ReconciliationPreview(additions=tuple(additions), taken_at=snapshot.taken_at)


def compute_preview_removals(
    snapshot: CatalogSnapshot,
    *,
    prune_empty_catalogs: bool = False,
) -> ReconciliationPreview:
    """Propose removal of associations whose provider-side model is gone.

    The catalog comparison is case-insensitive. Associations of a provider that
    no longer exists are always proposed. A provider whose catalog is empty is
    treated as "not discovered yet" and contributes nothing unless
    ``prune_empty_catalogs`` is set.
    """

    providers = snapshot.providers_by_id()
    models = snapshot.models_by_id()
    catalog_names = {
        provider.id: provider.catalog.normalized_names() for provider in snapshot.providers
    }
    removals: list[RemovalCandidate] = []

    for association in snapshot.associations:
        provider = providers.get(association.provider_id)
        model = models.get(association.model_id)
        reason: RemovalReason | None = None
        if provider is None:
            reason = RemovalReason.PROVIDER_MISSING
        else:
            names = catalog_names[provider.id]
            if not names and not prune_empty_catalogs:
                continue
            if association.provider_model.lower() not in names:
                reason = RemovalReason.CATALOG_MISSING
        if reason is None:
            continue
        removals.append(
            RemovalCandidate(
                association=association,
                model_name=model.name if model else "",
                provider_name=provider.name if provider else "",
                reason=reason,
            )
        )

    log.debug("Computed %s removal candidates", len(removals))
    return ReconciliationPreview(removals=tuple(removals), taken_at=snapshot.taken_at)
