"""Translate gateway payloads into domain objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from routekeeper.adapters.provider_config import parse_catalog
from routekeeper.domain.model import (
    Association,
    Capabilities,
    ManualAlias,
    Model,
    Provider,
)

from .schema import AssociationRequest

if TYPE_CHECKING:
    from routekeeper.domain.model import AssociationSpec

    from .schema import AssociationPayload, ModelPayload, ProviderPayload, TemplatePayload

MANUAL_SOURCE = "manual"


def to_provider(payload: ProviderPayload) -> Provider:
    return Provider(
        id=payload.id,
        name=payload.name,
        type=payload.type,
        catalog=parse_catalog(payload.config),
    )


def to_model(payload: ModelPayload) -> Model:
    return Model(id=payload.id, name=payload.name, remark=payload.remark)


def to_association(payload: AssociationPayload) -> Association:
    return Association(
        id=payload.id,
        model_id=payload.model_id,
        provider_id=payload.provider_id,
        provider_model=payload.provider_model,
        capabilities=Capabilities(
            tool_call=bool(payload.tool_call),
            structured_output=bool(payload.structured_output),
            image=bool(payload.image),
            with_header=bool(payload.with_header),
        ),
        weight=payload.weight,
        priority=payload.priority,
        # rows written before the status column existed count as enabled
        enabled=payload.status is None or payload.status,
    )


def to_association_request(spec: AssociationSpec) -> dict[str, object]:
    request = AssociationRequest(
        model_id=spec.model_id,
        provider_id=spec.provider_id,
        provider_model=spec.provider_model,
        tool_call=spec.capabilities.tool_call,
        structured_output=spec.capabilities.structured_output,
        image=spec.capabilities.image,
        with_header=spec.capabilities.with_header,
        weight=spec.weight,
        priority=spec.priority,
    )
    return request.model_dump(by_alias=True)


def manual_aliases_from_template(payload: TemplatePayload) -> list[ManualAlias]:
    return [
        ManualAlias(model_id=payload.model_id, alias=item.name)
        for item in payload.items
        if MANUAL_SOURCE in item.sources
    ]
