"""Alias templates: the names considered equivalent to a model."""

from __future__ import annotations

from dataclasses import dataclass

from routekeeper.domain.model.enums import AliasProvenance


@dataclass(frozen=True, slots=True)
class ManualAlias:
    """A stored alias row; the only persisted kind of template item."""

    model_id: int
    alias: str


@dataclass(frozen=True, slots=True)
class TemplateItem:
    model_id: int
    alias: str
    provenance: frozenset[AliasProvenance]

    @property
    def is_manual(self) -> bool:
        return AliasProvenance.MANUAL in self.provenance


@dataclass(frozen=True, slots=True)
class ModelTemplate:
    model_id: int
    model_name: str
    items: tuple[TemplateItem, ...] = ()

    @property
    def aliases(self) -> frozenset[str]:
        return frozenset(item.alias for item in self.items)

    def item_for(self, alias: str) -> TemplateItem | None:
        for item in self.items:
            if item.alias == alias:
                return item
        return None

    def is_match(self, candidate: str) -> bool:
        return candidate in self.aliases
