"""Immutable point-in-time view of the gateway's association configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from routekeeper.domain.model import Association, ManualAlias, Model, Provider
    from routekeeper.domain.ports import ConsoleStore

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True, kw_only=True)
class CatalogSnapshot:
    providers: tuple[Provider, ...] = ()
    models: tuple[Model, ...] = ()
    associations: tuple[Association, ...] = ()
    manual_aliases: tuple[ManualAlias, ...] = ()
    taken_at: datetime = field(default_factory=_utcnow)

    def provider(self, provider_id: int) -> Provider | None:
        for provider in self.providers:
            if provider.id == provider_id:
                return provider
        return None

    def model(self, model_id: int) -> Model | None:
        for model in self.models:
            if model.id == model_id:
                return model
        return None

    def models_by_id(self) -> dict[int, Model]:
        return {model.id: model for model in self.models}

    def providers_by_id(self) -> dict[int, Provider]:
        return {provider.id: provider for provider in self.providers}

    def associations_for(self, model_id: int) -> tuple[Association, ...]:
        return tuple(assoc for assoc in self.associations if assoc.model_id == model_id)

    def manual_aliases_for(self, model_id: int) -> tuple[ManualAlias, ...]:
        return tuple(item for item in self.manual_aliases if item.model_id == model_id)

    def existing_pairs(self) -> frozenset[tuple[int, str]]:
        """Lower-cased ``(provider_id, provider_model)`` pairs already associated."""
        return frozenset(assoc.pair_key for assoc in self.associations)


def load_snapshot(
    store: ConsoleStore,
    *,
    clock: Callable[[], datetime] = _utcnow,
) -> CatalogSnapshot:
    """Read everything reconciliation needs from ``store`` in one pass."""

    snapshot = CatalogSnapshot(
        providers=tuple(store.list_providers()),
        models=tuple(store.list_models()),
        associations=tuple(store.list_associations()),
        manual_aliases=tuple(store.list_manual_aliases()),
        taken_at=clock(),
    )
    log.debug(
        "Loaded catalog snapshot: providers=%s, models=%s, associations=%s, manual_aliases=%s",
        len(snapshot.providers),
        len(snapshot.models),
        len(snapshot.associations),
        len(snapshot.manual_aliases),
    )
    return snapshot
