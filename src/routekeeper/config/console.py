"""Console behaviour settings for reconciliation and verification."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int

DEFAULT_VERIFY_CONCURRENCY = 3
DEFAULT_ASSOCIATION_WEIGHT = 5
DEFAULT_ASSOCIATION_PRIORITY = 100


@dataclass(frozen=True, slots=True)
class ConsoleSettings:
    """Tunables read from ``ROUTEKEEPER_*`` environment variables."""

    verify_concurrency: int = DEFAULT_VERIFY_CONCURRENCY
    default_weight: int = DEFAULT_ASSOCIATION_WEIGHT
    default_priority: int = DEFAULT_ASSOCIATION_PRIORITY
    auto_associate_on_add: bool = False
    auto_clean_on_delete: bool = False
    prune_empty_catalogs: bool = False


def get_console_settings() -> ConsoleSettings:
    return ConsoleSettings(
        verify_concurrency=env_int(
            "ROUTEKEEPER_VERIFY_CONCURRENCY", DEFAULT_VERIFY_CONCURRENCY, minimum=1
        ),
        default_weight=env_int("ROUTEKEEPER_DEFAULT_WEIGHT", DEFAULT_ASSOCIATION_WEIGHT, minimum=1),
        default_priority=env_int(
            "ROUTEKEEPER_DEFAULT_PRIORITY", DEFAULT_ASSOCIATION_PRIORITY, minimum=0
        ),
        auto_associate_on_add=env_bool("ROUTEKEEPER_AUTO_ASSOCIATE_ON_ADD"),
        auto_clean_on_delete=env_bool("ROUTEKEEPER_AUTO_CLEAN_ON_DELETE"),
        prune_empty_catalogs=env_bool("ROUTEKEEPER_PRUNE_EMPTY_CATALOGS"),
    )
