"""Orchestrator for the reconciliation subsystem.

The engine reads a snapshot from the store, computes previews as pure
functions of that snapshot, and applies previews item by item. Automatic
follow-up actions after provider or catalog changes run synchronously through
the same engine so callers get the apply results as their completion signal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from routekeeper.domain.model import AssociationDefaults
from routekeeper.domain.snapshot import load_snapshot

from .apply import apply_preview
from .plan import ReconciliationPreview
from .preview import compute_preview_additions, compute_preview_removals

if TYPE_CHECKING:
    from routekeeper.domain.ports import ConsoleStore
    from routekeeper.domain.snapshot import CatalogSnapshot

    from .plan import ApplyResult

log = getLogger(__name__)


class AutoTrigger(StrEnum):
    """Provider and catalog changes that may be followed by an automatic reconciliation."""

    PROVIDER_ADDED = "provider_added"
    PROVIDER_UPDATED = "provider_updated"
    PROVIDER_REMOVED = "provider_removed"
    CATALOG_CHANGED = "catalog_changed"


_ASSOCIATE_AFTER = frozenset({AutoTrigger.PROVIDER_ADDED, AutoTrigger.PROVIDER_UPDATED})
_CLEAN_AFTER = frozenset({AutoTrigger.PROVIDER_UPDATED, AutoTrigger.PROVIDER_REMOVED})


@dataclass(frozen=True, slots=True)
class AutoActionResult:
    """Outcome of the follow-ups run for one trigger; ``None`` marks a skipped action."""

    associated: ApplyResult | None = None
    cleaned: ApplyResult | None = None

    @property
    def ran(self) -> bool:
        return self.associated is not None or self.cleaned is not None


@dataclass(frozen=True, slots=True)
class ReconciliationPolicy:
    defaults: AssociationDefaults = field(default_factory=AssociationDefaults)
    prune_empty_catalogs: bool = False
    auto_associate_on_add: bool = False
    auto_clean_on_delete: bool = False


@dataclass(slots=True)
class ReconciliationEngine:
    """Compute and apply association diffs against one store."""

    store: ConsoleStore
    policy: ReconciliationPolicy = field(default_factory=ReconciliationPolicy)

    def snapshot(self) -> CatalogSnapshot:
        return load_snapshot(self.store)

    def preview_additions(self, snapshot: CatalogSnapshot | None = None) -> ReconciliationPreview:
        return compute_preview_additions(snapshot or self.snapshot())

    def preview_removals(self, snapshot: CatalogSnapshot | None = None) -> ReconciliationPreview:
        return compute_preview_removals(
            snapshot or self.snapshot(),
            prune_empty_catalogs=self.policy.prune_empty_catalogs,
        )

    def preview(self, snapshot: CatalogSnapshot | None = None) -> ReconciliationPreview:
        """Additions and removals computed from one shared snapshot."""

        current = snapshot or self.snapshot()
        additions = self.preview_additions(current)
        removals = self.preview_removals(current)
        return ReconciliationPreview(
            additions=additions.additions,
            removals=removals.removals,
            taken_at=current.taken_at,
        )

    def apply(self, preview: ReconciliationPreview) -> ApplyResult:
        return apply_preview(self.store, preview, defaults=self.policy.defaults)

    def auto_associate(self) -> ApplyResult:
        preview = self.preview_additions()
        log.info("Auto-associate: %s candidate(s)", preview.add_count)
        return self.apply(preview)

    def clean_invalid(self) -> ApplyResult:
        preview = self.preview_removals()
        log.info("Clean invalid: %s candidate(s)", preview.remove_count)
        return self.apply(preview)

    def run_auto_actions(
        self,
        trigger: AutoTrigger,
        *,
        models_added: bool = False,
        models_removed: bool = False,
    ) -> AutoActionResult:
        """Run the follow-ups ``trigger`` calls for and the policy enables.

        Adding a provider auto-associates, removing one cleans, updating one does
        both. A catalog change auto-associates when ``models_added`` and cleans
        when ``models_removed``.
        """

        catalog_changed = trigger is AutoTrigger.CATALOG_CHANGED
        wants_associate = trigger in _ASSOCIATE_AFTER or (catalog_changed and models_added)
        wants_clean = trigger in _CLEAN_AFTER or (catalog_changed and models_removed)

        associated: ApplyResult | None = None
        cleaned: ApplyResult | None = None
        if wants_associate:
            if self.policy.auto_associate_on_add:
                associated = self.auto_associate()
            else:
                log.debug("Auto-associate disabled; skipping after %s", trigger)
        if wants_clean:
            if self.policy.auto_clean_on_delete:
                cleaned = self.clean_invalid()
            else:
                log.debug("Auto-clean disabled; skipping after %s", trigger)
        return AutoActionResult(associated=associated, cleaned=cleaned)
