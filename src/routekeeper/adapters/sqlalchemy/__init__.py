"""SQL adapter binding the console to a gateway database."""

from __future__ import annotations

from .lifecycle import (
    StartupError,
    configured_engine,
    current_session_factory,
    is_started,
    shutdown,
    startup,
)
from .store import SqlAlchemyConsoleStore
from .tables import (
    association_table,
    create_all_tables,
    metadata,
    model_table,
    provider_table,
    template_item_table,
)

__all__ = [
    "SqlAlchemyConsoleStore",
    "StartupError",
    "association_table",
    "configured_engine",
    "create_all_tables",
    "current_session_factory",
    "is_started",
    "metadata",
    "model_table",
    "provider_table",
    "shutdown",
    "startup",
    "template_item_table",
]
