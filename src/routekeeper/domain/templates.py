"""Alias templates and the index used for auto-matching catalog entries.

A model's template is the union of three alias sources:

- its canonical name (``canonical``)
- provider-side names already used by its associations (``derived``)
- aliases a user stored explicitly (``manual``)

Only manual aliases are persisted. Matching is a literal, case-sensitive
comparison: ``"GPT-4"`` and ``"gpt-4"`` are different aliases unless both exist.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

from routekeeper.domain.errors import (
    AliasNotFoundError,
    DuplicateAliasError,
    ModelNotFoundError,
    NotManualAliasError,
    ValidationError,
)
from routekeeper.domain.model import AliasProvenance, ModelTemplate, TemplateItem

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from routekeeper.domain.model import Association, ManualAlias, Model
    from routekeeper.domain.ports import ConsoleStore
    from routekeeper.domain.snapshot import CatalogSnapshot

log = getLogger(__name__)


def build_template(
    model: Model,
    associations: Iterable[Association],
    manual_aliases: Iterable[ManualAlias],
) -> ModelTemplate:
    """Merge every alias source of ``model`` into one template, sorted by alias."""

    provenance_by_alias: dict[str, set[AliasProvenance]] = defaultdict(set)

    def add(alias: str, provenance: AliasProvenance) -> None:
        if alias.strip():
            provenance_by_alias[alias].add(provenance)

    add(model.name, AliasProvenance.CANONICAL)
    for association in associations:
        if association.model_id == model.id:
            add(association.provider_model, AliasProvenance.DERIVED)
    for item in manual_aliases:
        if item.model_id == model.id:
            add(item.alias, AliasProvenance.MANUAL)

    items = tuple(
        TemplateItem(model_id=model.id, alias=alias, provenance=frozenset(tags))
        for alias, tags in sorted(provenance_by_alias.items())
    )
    return ModelTemplate(model_id=model.id, model_name=model.name, items=items)


def is_match(candidate: str, template: ModelTemplate) -> bool:
    return template.is_match(candidate)


class TemplateIndex:
    """Reverse lookup from alias to the models whose template contains it."""

    __slots__ = ("_by_alias",)

    def __init__(self, by_alias: Mapping[str, frozenset[int]]) -> None:
        self._by_alias = MappingProxyType(dict(by_alias))

    @classmethod
    def from_templates(cls, templates: Iterable[ModelTemplate]) -> TemplateIndex:
        by_alias: dict[str, set[int]] = defaultdict(set)
        for template in templates:
            for alias in template.aliases:
                by_alias[alias].add(template.model_id)
        return cls({alias: frozenset(ids) for alias, ids in by_alias.items()})

    @classmethod
    def from_snapshot(cls, snapshot: CatalogSnapshot) -> TemplateIndex:
        return cls.from_templates(
            build_template(model, snapshot.associations, snapshot.manual_aliases)
            for model in snapshot.models
        )

    def match(self, candidate: str) -> tuple[int, ...]:
        """Return the ids of every model whose template holds ``candidate`` verbatim."""
        return tuple(sorted(self._by_alias.get(candidate, ())))

    def is_match(self, candidate: str, model_id: int) -> bool:
        return model_id in self._by_alias.get(candidate, ())


@dataclass(slots=True)
class TemplateService:
    """Read and edit model templates through a store."""

    store: ConsoleStore

    def get_template(self, model_id: int) -> ModelTemplate:
        model = self._require_model(model_id)
        return build_template(
            model,
            self.store.list_associations(model_id),
            self.store.list_manual_aliases(model_id),
        )

    def list_templates(self) -> list[ModelTemplate]:
        associations = tuple(self.store.list_associations())
        manual_aliases = tuple(self.store.list_manual_aliases())
        return [
            build_template(model, associations, manual_aliases)
            for model in self.store.list_models()
        ]

    def add_manual_alias(self, model_id: int, alias: str) -> ModelTemplate:
        name = alias.strip()
        if not name:
            raise ValidationError("Alias must not be blank")
        template = self.get_template(model_id)
        if template.item_for(name) is not None:
            raise DuplicateAliasError(model_id, name)
        self.store.add_manual_alias(model_id, name)
        log.info("Added manual alias %r to model %s", name, model_id)
        return self.get_template(model_id)

    def remove_manual_alias(self, model_id: int, alias: str) -> ModelTemplate:
        name = alias.strip()
        template = self.get_template(model_id)
        item = template.item_for(name)
        if item is None:
            raise AliasNotFoundError(model_id, name)
        if not item.is_manual:
            raise NotManualAliasError(model_id, name)
        self.store.remove_manual_alias(model_id, name)
        log.info("Removed manual alias %r from model %s", name, model_id)
        return self.get_template(model_id)

    def _require_model(self, model_id: int) -> Model:
        for model in self.store.list_models():
            if model.id == model_id:
                return model
        raise ModelNotFoundError(model_id)
