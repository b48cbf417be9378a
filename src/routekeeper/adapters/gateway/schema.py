"""Pydantic models describing the gateway admin API payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GatewayBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Envelope(GatewayBaseModel):
    """Every admin response is wrapped as ``{"code": ..., "message": ..., "data": ...}``."""

    code: int
    message: str = ""
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.code == 200


class ProviderPayload(GatewayBaseModel):
    id: int = Field(alias="ID")
    name: str = Field(alias="Name")
    type: str = Field(default="", alias="Type")
    config: str = Field(default="", alias="Config")


class ModelPayload(GatewayBaseModel):
    id: int = Field(alias="ID")
    name: str = Field(alias="Name")
    remark: str = Field(default="", alias="Remark")


class AssociationPayload(GatewayBaseModel):
    id: int = Field(alias="ID")
    model_id: int = Field(alias="ModelID")
    provider_id: int = Field(alias="ProviderID")
    provider_model: str = Field(alias="ProviderModel")
    tool_call: bool | None = Field(default=None, alias="ToolCall")
    structured_output: bool | None = Field(default=None, alias="StructuredOutput")
    image: bool | None = Field(default=None, alias="Image")
    with_header: bool | None = Field(default=None, alias="WithHeader")
    status: bool | None = Field(default=None, alias="Status")
    weight: int = Field(default=1, alias="Weight")
    priority: int = Field(default=0, alias="Priority")


class AssociationRequest(GatewayBaseModel):
    """Body of ``POST /api/model-providers``.

    The gateway calls the provider-side model name ``provider_name``.
    """

    model_id: int
    provider_id: int
    provider_model: str = Field(serialization_alias="provider_name")
    tool_call: bool
    structured_output: bool
    image: bool
    with_header: bool
    weight: int
    priority: int
    customer_headers: dict[str, str] = Field(default_factory=dict)


class TemplateItemPayload(GatewayBaseModel):
    name: str
    sources: list[str] = Field(default_factory=list)


class TemplatePayload(GatewayBaseModel):
    model_id: int
    model_name: str = ""
    items: list[TemplateItemPayload] = Field(default_factory=list)


class BatchDeletePayload(GatewayBaseModel):
    deleted: int = 0
