from __future__ import annotations

import pytest

from routekeeper.domain.errors import (
    AliasNotFoundError,
    DuplicateAliasError,
    ModelNotFoundError,
    NotManualAliasError,
    ValidationError,
)
from routekeeper.domain.model import AliasProvenance, ManualAlias
from routekeeper.domain.snapshot import load_snapshot
from routekeeper.domain.templates import (
    TemplateIndex,
    TemplateService,
    build_template,
    is_match,
)
from tests.support.stores import InMemoryConsoleStore


@pytest.fixture
def template_store() -> InMemoryConsoleStore:
    seeded = InMemoryConsoleStore()
    seeded.add_model(1, "gpt-4o")
    seeded.add_model(2, "claude-sonnet")
    seeded.add_provider(10, "openai-main", upstream=["gpt-4o"])
    seeded.link(1, 10, "gpt-4o")
    seeded.link(1, 10, "openai/gpt-4o")
    seeded.manual_aliases.append(ManualAlias(model_id=1, alias="GPT4o"))
    return seeded


def test_build_template_merges_every_alias_source(template_store: InMemoryConsoleStore) -> None:
    model = template_store.models[1]

    template = build_template(
        model, template_store.associations.values(), template_store.manual_aliases
    )

    assert [item.alias for item in template.items] == ["GPT4o", "gpt-4o", "openai/gpt-4o"]
    canonical = template.item_for("gpt-4o")
    manual = template.item_for("GPT4o")
    assert canonical is not None
    assert manual is not None
    assert canonical.provenance == frozenset({AliasProvenance.CANONICAL, AliasProvenance.DERIVED})
    assert manual.is_manual


def test_template_matching_is_case_sensitive(template_store: InMemoryConsoleStore) -> None:
    template = TemplateService(template_store).get_template(1)

    assert is_match("gpt-4o", template)
    assert is_match("GPT4o", template)
    assert not is_match("GPT-4O", template)
    assert not is_match("gpt4o", template)


def test_template_index_returns_every_model_sharing_an_alias(
    template_store: InMemoryConsoleStore,
) -> None:
    template_store.manual_aliases.append(ManualAlias(model_id=2, alias="gpt-4o"))

    index = TemplateIndex.from_snapshot(load_snapshot(template_store))

    assert index.match("gpt-4o") == (1, 2)
    assert index.match("claude-sonnet") == (2,)
    assert index.match("unknown") == ()
    assert index.is_match("GPT4o", 1)
    assert not index.is_match("GPT4o", 2)


def test_add_manual_alias_strips_and_persists(template_store: InMemoryConsoleStore) -> None:
    template = TemplateService(template_store).add_manual_alias(2, "  sonnet-latest ")

    assert template.item_for("sonnet-latest") is not None
    assert ManualAlias(model_id=2, alias="sonnet-latest") in template_store.manual_aliases


@pytest.mark.parametrize("alias", ["gpt-4o", "openai/gpt-4o", "GPT4o"])
def test_add_manual_alias_rejects_existing_alias(
    template_store: InMemoryConsoleStore, alias: str
) -> None:
    with pytest.raises(DuplicateAliasError):
        TemplateService(template_store).add_manual_alias(1, alias)

    assert ("add_manual_alias", (1, alias)) not in template_store.calls


def test_add_manual_alias_accepts_case_variant(template_store: InMemoryConsoleStore) -> None:
    template = TemplateService(template_store).add_manual_alias(1, "GPT-4O")

    assert {"gpt-4o", "GPT-4O"} <= template.aliases


def test_add_manual_alias_rejects_blank(template_store: InMemoryConsoleStore) -> None:
    with pytest.raises(ValidationError):
        TemplateService(template_store).add_manual_alias(1, "   ")


def test_template_for_unknown_model_raises(template_store: InMemoryConsoleStore) -> None:
    with pytest.raises(ModelNotFoundError):
        TemplateService(template_store).get_template(99)


def test_remove_manual_alias(template_store: InMemoryConsoleStore) -> None:
    template = TemplateService(template_store).remove_manual_alias(1, "GPT4o")

    assert template.item_for("GPT4o") is None
    assert template_store.manual_aliases == []


@pytest.mark.parametrize("alias", ["gpt-4o", "openai/gpt-4o"])
def test_remove_manual_alias_refuses_non_manual_items(
    template_store: InMemoryConsoleStore, alias: str
) -> None:
    with pytest.raises(NotManualAliasError):
        TemplateService(template_store).remove_manual_alias(1, alias)


def test_remove_manual_alias_reports_missing_alias(template_store: InMemoryConsoleStore) -> None:
    with pytest.raises(AliasNotFoundError):
        TemplateService(template_store).remove_manual_alias(1, "nope")


def test_removing_manual_tag_keeps_derived_alias(template_store: InMemoryConsoleStore) -> None:
    template_store.manual_aliases.append(ManualAlias(model_id=1, alias="openai/gpt-4o"))

    template = TemplateService(template_store).remove_manual_alias(1, "openai/gpt-4o")

    item = template.item_for("openai/gpt-4o")
    assert item is not None
    assert item.provenance == frozenset({AliasProvenance.DERIVED})
