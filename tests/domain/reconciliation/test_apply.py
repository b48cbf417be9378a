from __future__ import annotations

import pytest

from routekeeper.domain.errors import StalePreviewError
from routekeeper.domain.model import AssociationDefaults
from routekeeper.domain.reconciliation import (
    AdditionCandidate,
    ReconciliationPreview,
    apply_preview,
    compute_preview_additions,
    compute_preview_removals,
)
from routekeeper.domain.snapshot import load_snapshot
from tests.support.stores import InMemoryConsoleStore


def _addition(provider_model: str) -> AdditionCandidate:
    return AdditionCandidate(
        model_id=1,
        model_name="gpt-4o",
        provider_id=10,
        provider_name="openai-main",
        provider_model=provider_model,
    )


def test_empty_preview_makes_no_store_calls(store: InMemoryConsoleStore) -> None:
    result = apply_preview(store, ReconciliationPreview())

    assert store.calls == []
    assert not result.changed
    assert result.failed == 0


def test_apply_creates_associations_with_defaults(gpt_store: InMemoryConsoleStore) -> None:
    preview = compute_preview_additions(load_snapshot(gpt_store))

    result = apply_preview(gpt_store, preview)

    assert result.added == 1
    (created,) = result.created
    assert created.provider_model == "gpt-4o"
    assert created.weight == 5
    assert created.priority == 100
    assert created.capabilities.tool_call
    assert not created.capabilities.image
    assert created.enabled


def test_apply_uses_configured_defaults(gpt_store: InMemoryConsoleStore) -> None:
    preview = compute_preview_additions(load_snapshot(gpt_store))

    result = apply_preview(gpt_store, preview, defaults=AssociationDefaults(weight=2, priority=7))

    assert (result.created[0].weight, result.created[0].priority) == (2, 7)


def test_pair_created_after_preview_is_skipped_as_stale(gpt_store: InMemoryConsoleStore) -> None:
    preview = compute_preview_additions(load_snapshot(gpt_store))
    gpt_store.link(1, 10, "GPT-4o")

    result = apply_preview(gpt_store, preview)

    assert result.added == 0
    assert result.stale_skipped == 1
    assert not any(name == "create_association" for name, _ in gpt_store.calls)


def test_association_deleted_after_preview_is_skipped_as_stale(
    gpt_store: InMemoryConsoleStore,
) -> None:
    stale = gpt_store.link(1, 10, "old-model")
    preview = compute_preview_removals(load_snapshot(gpt_store))
    del gpt_store.associations[stale.id]

    result = apply_preview(gpt_store, preview)

    assert result.removed == 0
    assert result.stale_skipped == 1


def test_delete_race_reported_by_store_counts_as_stale(gpt_store: InMemoryConsoleStore) -> None:
    class RacingStore(InMemoryConsoleStore):
        def delete_association(self, association_id: int) -> None:
            raise StalePreviewError(f"Association {association_id} no longer exists")

    racing = RacingStore(
        providers=gpt_store.providers,
        models=gpt_store.models,
    )
    racing.link(1, 10, "old-model")
    preview = compute_preview_removals(load_snapshot(racing))

    result = apply_preview(racing, preview)

    assert result.stale_skipped == 1
    assert result.failed == 0


def test_item_failures_do_not_abort_the_batch(gpt_store: InMemoryConsoleStore) -> None:
    gpt_store.fail_create.add("broken")
    doomed = gpt_store.link(1, 10, "doomed")
    removable = gpt_store.link(1, 10, "removable")
    gpt_store.fail_delete.add(doomed.id)
    removals = compute_preview_removals(load_snapshot(gpt_store)).removals
    preview = ReconciliationPreview(
        additions=(_addition("broken"), _addition("fine")), removals=removals
    )

    result = apply_preview(gpt_store, preview)

    assert result.added == 1
    assert result.removed == 1
    assert removable.id not in gpt_store.associations
    assert doomed.id in gpt_store.associations
    assert result.failed == 2
    messages = sorted(failure.message for failure in result.failures)
    assert messages == ["create rejected for broken", f"delete rejected for {doomed.id}"]


@pytest.mark.parametrize("provider_model", ["gpt-4o", "GPT-4O"])
def test_additions_dedupe_against_live_pairs(
    gpt_store: InMemoryConsoleStore, provider_model: str
) -> None:
    gpt_store.link(1, 10, provider_model)

    result = apply_preview(gpt_store, ReconciliationPreview(additions=(_addition("gpt-4o"),)))

    assert result.stale_skipped == 1
