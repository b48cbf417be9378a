"""Combined store port implemented by each gateway binding."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .catalog import CatalogStore
from .templates import ManualAliasStore


@runtime_checkable
class ConsoleStore(CatalogStore, ManualAliasStore, Protocol):
    """Everything the reconciliation side of the console reads and writes."""
