"""Ports for reading and mutating the gateway's association configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from routekeeper.domain.model import Association, AssociationSpec, Model, Provider


@runtime_checkable
class CatalogStore(Protocol):
    """Providers with their catalogs, models, and the associations between them.

    ``delete_association`` raises ``StalePreviewError`` when the target no longer
    exists. ``batch_delete_associations`` returns the number of rows removed.
    """

    def list_providers(self) -> Sequence[Provider]: ...

    def list_models(self) -> Sequence[Model]: ...

    def list_associations(self, model_id: int | None = None) -> Sequence[Association]: ...

    def create_association(self, spec: AssociationSpec) -> Association: ...

    def delete_association(self, association_id: int) -> None: ...

    def batch_delete_associations(self, association_ids: Sequence[int]) -> int: ...

    def set_association_enabled(self, association_id: int, enabled: bool) -> Association: ...
