"""Gateway admin API configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .env import env_float, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

GATEWAY_URL_ENV = "ROUTEKEEPER_GATEWAY_URL"
GATEWAY_TOKEN_ENV = "ROUTEKEEPER_GATEWAY_TOKEN"
GATEWAY_TIMEOUT_ENV = "ROUTEKEEPER_GATEWAY_TIMEOUT"
DEFAULT_GATEWAY_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class GatewayConfig:
    """Holds the gateway admin API location and credentials."""

    base_url: str
    token: str
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(name="gateway")
    )

    def admin_resilience(self) -> ResilienceConfig:
        """Transport settings for catalog and template calls."""

        return replace(
            self.resilience,
            base_url=self.base_url,
            default_headers={"Authorization": f"Bearer {self.token}"},
        )

    def verification_resilience(self) -> ResilienceConfig:
        """Transport settings for test calls: no transport retries, no rate limit."""

        return replace(
            self.admin_resilience(),
            name=f"{self.resilience.name}-verify",
            retry=RetryPolicy.disabled(),
            ratelimit=None,
        )


def get_gateway_config(*, resilience: ResilienceConfig | None = None) -> GatewayConfig:
    values = require_env_vars((GATEWAY_URL_ENV, GATEWAY_TOKEN_ENV))
    timeout = env_float(GATEWAY_TIMEOUT_ENV, DEFAULT_GATEWAY_TIMEOUT_SECONDS)
    return GatewayConfig(
        base_url=values[GATEWAY_URL_ENV].rstrip("/"),
        token=values[GATEWAY_TOKEN_ENV],
        resilience=resilience
        or ResilienceConfig(
            name="gateway",
            timeout_seconds=timeout,
            ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
        ),
    )
