"""Providers, their model catalogs, and gateway-facing models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from routekeeper.domain.model.enums import CatalogSource

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    name: str
    source: CatalogSource = CatalogSource.UPSTREAM


@dataclass(frozen=True, slots=True)
class Catalog:
    """Ordered set of provider-side model identifiers.

    Upstream entries come before custom ones; an exact duplicate keeps the tag
    it was first seen with. Blank names are dropped.
    """

    entries: tuple[CatalogEntry, ...] = ()

    @classmethod
    def build(cls, *, upstream: Iterable[str] = (), custom: Iterable[str] = ()) -> Catalog:
        seen: set[str] = set()
        entries: list[CatalogEntry] = []
        for source, names in ((CatalogSource.UPSTREAM, upstream), (CatalogSource.CUSTOM, custom)):
            for raw in names:
                name = raw.strip()
                if not name or name in seen:
                    continue
                seen.add(name)
                entries.append(CatalogEntry(name=name, source=source))
        return cls(entries=tuple(entries))

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(entry.name for entry in self.entries)

    def names_from(self, source: CatalogSource) -> tuple[str, ...]:
        return tuple(entry.name for entry in self.entries if entry.source is source)

    def normalized_names(self) -> frozenset[str]:
        return frozenset(entry.name.lower() for entry in self.entries)


@dataclass(frozen=True, slots=True)
class Provider:
    id: int
    name: str
    type: str
    catalog: Catalog = field(default_factory=Catalog)


@dataclass(frozen=True, slots=True)
class Model:
    id: int
    name: str
    remark: str = ""
