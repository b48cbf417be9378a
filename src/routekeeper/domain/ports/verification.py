"""Ports for issuing remote verification (test) calls."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Verifier(Protocol):
    """Issues test calls against the gateway.

    Each method returns normally on success and raises ``RemoteCallError`` on
    failure. Timeouts are the transport's responsibility.
    """

    async def verify_association(self, association_id: int) -> None: ...

    async def verify_model(self, provider_id: int, model_name: str) -> None: ...
