from __future__ import annotations

import asyncio

import httpx
import pytest

from routekeeper.adapters.gateway import GatewayVerifier
from routekeeper.config import GatewayConfig
from routekeeper.domain.errors import RemoteCallError

from tests.support.gateway import FakeGateway, envelope


def _verify_association(
    gateway: FakeGateway, config: GatewayConfig, association_id: int
) -> None:
    async def scenario() -> None:
        async with GatewayVerifier(config, client_factory=gateway.client_factory()) as verifier:
            await verifier.verify_association(association_id)

    asyncio.run(scenario())


def test_successful_association_test(gateway: FakeGateway, gateway_config: GatewayConfig) -> None:
    gateway.on("GET", "/api/test/5", envelope({"latency_ms": 120}))

    _verify_association(gateway, gateway_config, 5)

    assert gateway.requests[0].url.path == "/api/test/5"


def test_failed_test_call_raises_remote_error(
    gateway: FakeGateway, gateway_config: GatewayConfig
) -> None:
    gateway.on("GET", "/api/test/5", envelope(code=500, message="upstream returned 401"))

    with pytest.raises(RemoteCallError, match="upstream returned 401") as exc:
        _verify_association(gateway, gateway_config, 5)

    assert exc.value.status_code == 500


def test_non_envelope_error_response(gateway: FakeGateway, gateway_config: GatewayConfig) -> None:
    gateway.on("GET", "/api/test/5", httpx.Response(502, text="Bad Gateway"))

    with pytest.raises(RemoteCallError, match="HTTP 502"):
        _verify_association(gateway, gateway_config, 5)
    assert len(gateway.requests) == 1


def test_transport_errors_become_remote_errors(
    gateway: FakeGateway, gateway_config: GatewayConfig
) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway.on("GET", "/api/test/5", refuse)

    with pytest.raises(RemoteCallError, match="connection refused"):
        _verify_association(gateway, gateway_config, 5)


def test_provider_model_test_posts_model_name(
    gateway: FakeGateway, gateway_config: GatewayConfig
) -> None:
    gateway.on("POST", "/api/providers/10/test", envelope())

    async def scenario() -> None:
        async with GatewayVerifier(
            gateway_config, client_factory=gateway.client_factory()
        ) as verifier:
            await verifier.verify_model(10, "gpt-4o")

    asyncio.run(scenario())

    assert gateway.last_json() == {"model": "gpt-4o"}


def test_verifier_must_be_entered() -> None:
    verifier = GatewayVerifier(GatewayConfig(base_url="http://gateway.test", token="t"))

    with pytest.raises(RuntimeError):
        asyncio.run(verifier.verify_association(1))
