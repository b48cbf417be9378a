from __future__ import annotations

import pytest

from routekeeper import app
from routekeeper.adapters.sqlalchemy import SqlAlchemyConsoleStore
from routekeeper.config import ConsoleSettings
from routekeeper.domain.errors import NotFoundError, ValidationError
from routekeeper.domain.reconciliation import AutoTrigger
from routekeeper.domain.verification import JobState
from tests.support.stores import InMemoryConsoleStore
from tests.support.verifiers import GatedVerifier


def test_preview_reconciliation_has_no_side_effects(
    gpt_store: InMemoryConsoleStore, settings: ConsoleSettings
) -> None:
    preview = app.preview_reconciliation(store=gpt_store, settings=settings)

    assert preview.add_count == 1
    assert gpt_store.mutations() == []


@pytest.mark.parametrize(
    ("mode", "added", "removed"), [("associate", 1, 0), ("clean", 0, 1), ("all", 1, 1)]
)
def test_apply_reconciliation_modes(
    gpt_store: InMemoryConsoleStore,
    settings: ConsoleSettings,
    mode: app.ReconcileMode,
    added: int,
    removed: int,
) -> None:
    gpt_store.link(1, 10, "retired")

    result = app.apply_reconciliation(mode, store=gpt_store, settings=settings)

    assert (result.added, result.removed) == (added, removed)


def test_settings_feed_association_defaults(gpt_store: InMemoryConsoleStore) -> None:
    settings = ConsoleSettings(default_weight=9, default_priority=3)

    result = app.apply_reconciliation("associate", store=gpt_store, settings=settings)

    assert (result.created[0].weight, result.created[0].priority) == (9, 3)


def test_add_association_never_triggers_auto_actions(gpt_store: InMemoryConsoleStore) -> None:
    settings = ConsoleSettings(auto_associate_on_add=True, auto_clean_on_delete=True)

    association = app.add_association(
        1, 10, " gpt-4o-mini ", weight=2, store=gpt_store, settings=settings
    )

    assert association.provider_model == "gpt-4o-mini"
    assert (association.weight, association.priority) == (2, 100)
    assert [item.provider_model for item in gpt_store.associations.values()] == ["gpt-4o-mini"]

def test_add_association_validates_before_writing(
    gpt_store: InMemoryConsoleStore, settings: ConsoleSettings
) -> None:
    with pytest.raises(ValidationError):
        app.add_association(1, 10, "gpt-4o", weight=0, store=gpt_store, settings=settings)

    assert gpt_store.mutations() == []


def test_remove_association_leaves_other_rows_alone(gpt_store: InMemoryConsoleStore) -> None:
    manual = gpt_store.link(1, 10, "gpt-4o")
    orphan = gpt_store.link(1, 77, "gpt-4o")

    app.remove_association(manual.id, store=gpt_store)

    assert list(gpt_store.associations) == [orphan.id]


def test_provider_update_runs_enabled_follow_ups(gpt_store: InMemoryConsoleStore) -> None:
    orphan = gpt_store.link(1, 77, "gpt-4o")
    settings = ConsoleSettings(auto_associate_on_add=True, auto_clean_on_delete=True)

    result = app.run_auto_actions(
        AutoTrigger.PROVIDER_UPDATED, store=gpt_store, settings=settings
    )

    assert result.associated is not None
    assert [item.provider_model for item in result.associated.created] == ["gpt-4o"]
    assert result.cleaned is not None
    assert orphan.id not in gpt_store.associations


def test_catalog_change_without_enabled_follow_ups_is_a_no_op(
    gpt_store: InMemoryConsoleStore, settings: ConsoleSettings
) -> None:
    result = app.run_auto_actions(
        AutoTrigger.CATALOG_CHANGED,
        models_added=True,
        models_removed=True,
        store=gpt_store,
        settings=settings,
    )

    assert not result.ran
    assert gpt_store.mutations() == []

def test_template_commands(gpt_store: InMemoryConsoleStore) -> None:
    added = app.add_template_alias(1, "GPT-4O", store=gpt_store)
    assert "GPT-4O" in added.aliases

    shown = app.show_template(1, store=gpt_store)
    assert shown == added

    removed = app.remove_template_alias(1, "GPT-4O", store=gpt_store)
    assert "GPT-4O" not in removed.aliases


def test_verify_associations_disables_failures(
    gpt_store: InMemoryConsoleStore, settings: ConsoleSettings
) -> None:
    good = gpt_store.link(1, 10, "gpt-4o")
    bad = gpt_store.link(1, 10, "gpt-4o-mini")
    verifier = GatedVerifier(auto_release=True, failures={bad.id: "HTTP 401"})

    report = app.verify_associations(
        store=gpt_store, verifier=verifier, disable_failed=True, settings=settings
    )

    assert report.progress.succeeded == 1
    assert report.errors == {bad.id: "HTTP 401"}
    assert report.disabled is not None
    assert report.disabled.affected == 1
    assert not gpt_store.associations[bad.id].enabled
    assert gpt_store.associations[good.id].enabled


def test_verify_associations_of_one_model(
    gpt_store: InMemoryConsoleStore, settings: ConsoleSettings
) -> None:
    gpt_store.add_model(2, "other")
    mine = gpt_store.link(1, 10, "gpt-4o")
    gpt_store.link(2, 10, "gpt-4o-mini")
    verifier = GatedVerifier(auto_release=True)

    report = app.verify_associations(
        model_id=1, store=gpt_store, verifier=verifier, settings=settings
    )

    assert report.run.job_ids() == (mine.id,)
    assert report.disabled is None


def test_verify_provider_models_defaults_to_catalog(
    gpt_store: InMemoryConsoleStore, settings: ConsoleSettings
) -> None:
    verifier = GatedVerifier(auto_release=True, failures={"GPT-4O": "model not found"})

    report = app.verify_provider_models(
        10, store=gpt_store, verifier=verifier, concurrency=2, settings=settings
    )

    assert report.run.job_ids(JobState.SUCCEEDED) == ("gpt-4o", "gpt-4o-mini")
    assert report.run.job_ids(JobState.FAILED) == ("GPT-4O",)
    assert verifier.max_in_flight <= 2


def test_verify_provider_models_of_unknown_provider(
    gpt_store: InMemoryConsoleStore, settings: ConsoleSettings
) -> None:
    with pytest.raises(NotFoundError):
        app.verify_provider_models(
            99, store=gpt_store, verifier=GatedVerifier(auto_release=True), settings=settings
        )


def test_verify_rejects_non_positive_concurrency(
    gpt_store: InMemoryConsoleStore, settings: ConsoleSettings
) -> None:
    with pytest.raises(ValidationError):
        app.verify_associations(
            store=gpt_store,
            verifier=GatedVerifier(auto_release=True),
            concurrency=0,
            settings=settings,
        )


@pytest.mark.usefixtures("started_adapter")
def test_build_store_for_sqlite_backend() -> None:
    assert isinstance(app.build_store("sqlite"), SqlAlchemyConsoleStore)


def test_build_store_rejects_unknown_backend() -> None:
    with pytest.raises(ValueError, match="Unsupported backend"):
        app.build_store("redis")  # pyright: ignore[reportArgumentType]
