"""Model/provider associations and their creation payloads."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from routekeeper.domain.errors import ValidationError


@dataclass(frozen=True, slots=True)
class Capabilities:
    tool_call: bool = True
    structured_output: bool = False
    image: bool = False
    with_header: bool = False


def _validate_routing(weight: int, priority: int) -> None:
    if weight <= 0:
        raise ValidationError(f"Association weight must be > 0, got {weight}")
    if priority < 0:
        raise ValidationError(f"Association priority must be >= 0, got {priority}")


@dataclass(frozen=True, slots=True, kw_only=True)
class AssociationSpec:
    """Everything needed to create an association."""

    model_id: int
    provider_id: int
    provider_model: str
    capabilities: Capabilities = field(default_factory=Capabilities)
    weight: int
    priority: int
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.provider_model.strip():
            raise ValidationError("Provider-side model name must not be blank")
        _validate_routing(self.weight, self.priority)

    def with_overrides(self, **changes: Any) -> AssociationSpec:
        return replace(self, **changes)


@dataclass(frozen=True, slots=True, kw_only=True)
class Association:
    id: int
    model_id: int
    provider_id: int
    provider_model: str
    capabilities: Capabilities = field(default_factory=Capabilities)
    weight: int
    priority: int
    enabled: bool = True

    @property
    def pair_key(self) -> tuple[int, str]:
        """Case-normalized ``(provider_id, provider_model)`` lookup key."""
        return (self.provider_id, self.provider_model.lower())

    def to_spec(self) -> AssociationSpec:
        return AssociationSpec(
            model_id=self.model_id,
            provider_id=self.provider_id,
            provider_model=self.provider_model,
            capabilities=self.capabilities,
            weight=self.weight,
            priority=self.priority,
            enabled=self.enabled,
        )


@dataclass(frozen=True, slots=True)
class AssociationDefaults:
    """Routing metadata applied to associations created by reconciliation."""

    weight: int = 5
    priority: int = 100
    capabilities: Capabilities = field(default_factory=Capabilities)
    enabled: bool = True

    def __post_init__(self) -> None:
        _validate_routing(self.weight, self.priority)

    def spec_for(self, *, model_id: int, provider_id: int, provider_model: str) -> AssociationSpec:
        return AssociationSpec(
            model_id=model_id,
            provider_id=provider_id,
            provider_model=provider_model,
            capabilities=self.capabilities,
            weight=self.weight,
            priority=self.priority,
            enabled=self.enabled,
        )
