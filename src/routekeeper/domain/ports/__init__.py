"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import CatalogStore
from .store import ConsoleStore
from .templates import ManualAliasStore
from .verification import Verifier

__all__ = [
    "CatalogStore",
    "ConsoleStore",
    "ManualAliasStore",
    "Verifier",
]
