from __future__ import annotations

import pytest

from routekeeper.config import GatewayConfig, ResilienceConfig, RetryPolicy
from tests.support.gateway import FakeGateway


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(
        base_url="http://gateway.test",
        token="admin-token",
        resilience=ResilienceConfig(name="gateway-test", retry=RetryPolicy.disabled()),
    )
