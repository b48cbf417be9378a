"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class CatalogSource(StrEnum):
    """Where a provider catalog entry came from."""

    UPSTREAM = "upstream"
    CUSTOM = "custom"


class AliasProvenance(StrEnum):
    """Origin tag of a template alias."""

    CANONICAL = "canonical"
    DERIVED = "derived"
    MANUAL = "manual"

