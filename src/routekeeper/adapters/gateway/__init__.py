"""Gateway admin API adapter."""

from __future__ import annotations

from .client import GatewayAPIError, GatewayStore, GatewayVerifier

__all__ = ["GatewayAPIError", "GatewayStore", "GatewayVerifier"]
