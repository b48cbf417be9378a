"""Errors raised while reading ``ROUTEKEEPER_*`` and ``DATABASE_URI`` settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """An environment value is present but unusable (bad number, flag or bound)."""


class MissingConfigurationError(ConfigurationError):
    """Required variables are unset or blank; ``missing`` names them in sorted order."""

    def __init__(self, message: str, *, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing = tuple(missing)
