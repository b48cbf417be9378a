"""Provider ``Config`` JSON documents shared by the gateway bindings."""

from __future__ import annotations

from logging import getLogger

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from routekeeper.domain.model import Catalog

log = getLogger(__name__)


class ProviderConfigPayload(BaseModel):
    """The JSON document stored alongside each provider.

    Only the model lists matter here; credentials and other keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    upstream_models: list[str] = Field(default_factory=list)
    custom_models: list[str] = Field(default_factory=list)

    @field_validator("upstream_models", "custom_models", mode="before")
    @classmethod
    def _keep_strings(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, str)]
        return value


def parse_catalog(config: str | None) -> Catalog:
    """Build a catalog from a provider's JSON config; unreadable configs give an empty one."""

    if not config or not config.strip():
        return Catalog()
    try:
        payload = ProviderConfigPayload.model_validate_json(config)
    except PydanticValidationError as exc:
        log.warning(f"Ignoring unreadable provider config: {exc.errors()[0]['msg']}")
        return Catalog()
    return Catalog.build(upstream=payload.upstream_models, custom=payload.custom_models)
