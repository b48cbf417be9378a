"""HTTP bindings for the gateway admin API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Self

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from routekeeper.adapters.http_resilience import ResilientClient
from routekeeper.config import get_gateway_config
from routekeeper.domain.errors import (
    AssociationNotFoundError,
    ModelNotFoundError,
    RemoteCallError,
    StalePreviewError,
)

from .schema import (
    AssociationPayload,
    BatchDeletePayload,
    Envelope,
    ModelPayload,
    ProviderPayload,
    TemplatePayload,
)
from .translator import (
    manual_aliases_from_template,
    to_association,
    to_association_request,
    to_model,
    to_provider,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Sequence
    from types import TracebackType

    from routekeeper.config import GatewayConfig, ResilienceConfig
    from routekeeper.domain.model import (
        Association,
        AssociationSpec,
        ManualAlias,
        Model,
        Provider,
    )
    from routekeeper.domain.ports import ConsoleStore, Verifier

log = getLogger(__name__)

_PROVIDERS = TypeAdapter(list[ProviderPayload])
_MODELS = TypeAdapter(list[ModelPayload])
_ASSOCIATIONS = TypeAdapter(list[AssociationPayload])


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class GatewayAPIError(RuntimeError):
    """Raised when the gateway answers with a non-success envelope or an unreadable body."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code

    @property
    def is_not_found(self) -> bool:
        return self.code == httpx.codes.NOT_FOUND


def _unwrap(response: httpx.Response) -> object:
    """Return the ``data`` member of an envelope, raising on anything but code 200."""

    try:
        envelope = Envelope.model_validate_json(response.content)
    except PydanticValidationError:
        if response.is_error:
            raise GatewayAPIError(
                f"Gateway returned HTTP {response.status_code}", code=response.status_code
            ) from None
        raise GatewayAPIError("Unexpected gateway response payload") from None

    if not envelope.ok:
        message = envelope.message or f"Gateway returned code {envelope.code}"
        raise GatewayAPIError(message, code=envelope.code)
    return envelope.data


async def _call(
    client: ResilientClient,
    method: str,
    url: str,
    *,
    json: object = None,
    params: dict[str, str | int] | None = None,
) -> object:
    try:
        response = await client.request(method, url, json=json, params=params)
    except httpx.HTTPError as exc:
        raise GatewayAPIError(f"{method} {url} failed: {exc}") from exc
    return _unwrap(response)


@dataclass(slots=True)
class GatewayStore:
    """Synchronous ``ConsoleStore`` backed by the gateway admin API.

    Each call opens a short-lived client inside ``asyncio.run``; do not call it
    from a running event loop.
    """

    config: GatewayConfig = field(default_factory=get_gateway_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    # catalog ---------------------------------------------------------------

    def list_providers(self) -> list[Provider]:
        data = self._run(self._get("/api/providers"))
        return [to_provider(payload) for payload in _PROVIDERS.validate_python(data or [])]

    def list_models(self) -> list[Model]:
        data = self._run(self._get("/api/models"))
        return [to_model(payload) for payload in _MODELS.validate_python(data or [])]

    def list_associations(self, model_id: int | None = None) -> list[Association]:
        params: dict[str, str | int] | None = None if model_id is None else {"model_id": model_id}
        data = self._run(self._get("/api/model-providers", params=params))
        return [to_association(payload) for payload in _ASSOCIATIONS.validate_python(data or [])]

    def create_association(self, spec: AssociationSpec) -> Association:
        body = to_association_request(spec)
        data = self._run(self._send("POST", "/api/model-providers", json=body))
        association = to_association(AssociationPayload.model_validate(data))
        if not spec.enabled and association.enabled:
            # the gateway always creates rows enabled
            association = self.set_association_enabled(association.id, enabled=False)
        log.debug(
            f"Created association {association.id} "
            f"(model={spec.model_id}, provider={spec.provider_id}, name={spec.provider_model!r})"
        )
        return association

    def delete_association(self, association_id: int) -> None:
        try:
            self._run(self._send("DELETE", f"/api/model-providers/{association_id}"))
        except GatewayAPIError as exc:
            if exc.is_not_found:
                raise StalePreviewError(f"Association {association_id} no longer exists") from exc
            raise

    def batch_delete_associations(self, association_ids: Sequence[int]) -> int:
        if not association_ids:
            return 0
        data = self._run(
            self._send("DELETE", "/api/model-providers/batch", json={"ids": list(association_ids)})
        )
        return BatchDeletePayload.model_validate(data or {}).deleted

    def set_association_enabled(self, association_id: int, enabled: bool) -> Association:
        try:
            data = self._run(
                self._send(
                    "PATCH",
                    f"/api/model-providers/{association_id}/status",
                    json={"status": enabled},
                )
            )
        except GatewayAPIError as exc:
            if exc.is_not_found:
                raise AssociationNotFoundError(association_id) from exc
            raise
        return to_association(AssociationPayload.model_validate(data))

    # templates -------------------------------------------------------------

    def list_manual_aliases(self, model_id: int | None = None) -> list[ManualAlias]:
        if model_id is not None:
            return manual_aliases_from_template(self._fetch_template(model_id))
        aliases: list[ManualAlias] = []
        for model in self.list_models():
            aliases.extend(manual_aliases_from_template(self._fetch_template(model.id)))
        return aliases

    def add_manual_alias(self, model_id: int, alias: str) -> None:
        self._template_item("POST", model_id, alias)

    def remove_manual_alias(self, model_id: int, alias: str) -> None:
        self._template_item("DELETE", model_id, alias)

    def _fetch_template(self, model_id: int) -> TemplatePayload:
        try:
            data = self._run(self._get(f"/api/models/{model_id}/template"))
        except GatewayAPIError as exc:
            if exc.is_not_found:
                raise ModelNotFoundError(model_id) from exc
            raise
        return TemplatePayload.model_validate(data)

    def _template_item(self, method: str, model_id: int, alias: str) -> None:
        url = f"/api/models/{model_id}/template/items"
        try:
            self._run(self._send(method, url, json={"name": alias}))
        except GatewayAPIError as exc:
            if exc.is_not_found:
                raise ModelNotFoundError(model_id) from exc
            raise

    # plumbing --------------------------------------------------------------

    def _run[T](self, coro: Coroutine[object, object, T]) -> T:
        return asyncio.run(coro)

    async def _get(self, url: str, *, params: dict[str, str | int] | None = None) -> object:
        async with self.client_factory(self.config.admin_resilience()) as client:
            return await _call(client, "GET", url, params=params)

    async def _send(self, method: str, url: str, *, json: object = None) -> object:
        async with self.client_factory(self.config.admin_resilience()) as client:
            return await _call(client, method, url, json=json)


class GatewayVerifier:
    """Async ``Verifier`` that drives the gateway's test endpoints.

    Use as an async context manager so a single client serves a whole run.
    Every failure surfaces as ``RemoteCallError``.
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
    ) -> None:
        self.config = config or get_gateway_config()
        self._client_factory = client_factory
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> Self:
        self._client = self._client_factory(self.config.verification_resilience())
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def verify_association(self, association_id: int) -> None:
        await self._probe("GET", f"/api/test/{association_id}")

    async def verify_model(self, provider_id: int, model_name: str) -> None:
        await self._probe("POST", f"/api/providers/{provider_id}/test", json={"model": model_name})

    async def _probe(self, method: str, url: str, *, json: object = None) -> None:
        if self._client is None:
            raise RuntimeError("GatewayVerifier must be entered before use")
        try:
            await _call(self._client, method, url, json=json)
        except GatewayAPIError as exc:
            raise RemoteCallError(str(exc), status_code=exc.code) from exc


if TYPE_CHECKING:
    _store_check: ConsoleStore = GatewayStore()
    _verifier_check: Verifier = GatewayVerifier()
