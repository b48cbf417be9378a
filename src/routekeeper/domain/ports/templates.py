"""Ports for the persisted (manual) part of model templates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from routekeeper.domain.model import ManualAlias


@runtime_checkable
class ManualAliasStore(Protocol):
    """Storage of manually added aliases.

    Canonical and derived aliases are never stored; they are recomputed from
    models and associations on every read.
    """

    def list_manual_aliases(self, model_id: int | None = None) -> Sequence[ManualAlias]: ...

    def add_manual_alias(self, model_id: int, alias: str) -> None: ...

    def remove_manual_alias(self, model_id: int, alias: str) -> None: ...
