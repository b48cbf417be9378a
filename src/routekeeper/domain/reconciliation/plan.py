"""Preview and apply result types shared by the reconciliation stages.

The preview is the contract between computing a diff and mutating the store:
``apply`` works from the exact items the user saw, never from a recomputation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from routekeeper.domain.model import Association


@dataclass(frozen=True, slots=True, kw_only=True)
class AdditionCandidate:
    """A catalog entry that matched a model template and is not yet associated."""

    model_id: int
    model_name: str
    provider_id: int
    provider_name: str
    provider_model: str

    @property
    def pair_key(self) -> tuple[int, str]:
        return (self.provider_id, self.provider_model.lower())

    @property
    def key(self) -> tuple[int, int, str]:
        return (self.model_id, self.provider_id, self.provider_model.lower())


class RemovalReason(StrEnum):
    PROVIDER_MISSING = "provider_missing"
    CATALOG_MISSING = "catalog_missing"


@dataclass(frozen=True, slots=True, kw_only=True)
class RemovalCandidate:
    """An existing association whose provider-side model left the catalog."""

    association: Association
    model_name: str
    provider_name: str
    reason: RemovalReason

    @property
    def association_id(self) -> int:
        return self.association.id


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationPreview:
    additions: tuple[AdditionCandidate, ...] = ()
    removals: tuple[RemovalCandidate, ...] = ()
    taken_at: datetime | None = None

    @property
    def add_count(self) -> int:
        return len(self.additions)

    @property
    def remove_count(self) -> int:
        return len(self.removals)

    @property
    def is_empty(self) -> bool:
        return not self.additions and not self.removals


type PreviewItem = AdditionCandidate | RemovalCandidate


@dataclass(frozen=True, slots=True)
class ItemFailure:
    """A single preview item that could not be applied."""

    item: PreviewItem
    message: str


@dataclass(slots=True)
class ApplyResult:
    """Summary of the store mutations performed for one preview."""

    added: int = 0
    removed: int = 0
    stale_skipped: int = 0
    created: list[Association] = field(default_factory=list["Association"])
    failures: list[ItemFailure] = field(default_factory=list[ItemFailure])

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)
