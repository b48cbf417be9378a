from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from routekeeper.adapters.sqlalchemy import create_all_tables, shutdown, startup
from routekeeper.config import ConsoleSettings
from tests.support.stores import InMemoryConsoleStore

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture
def store() -> InMemoryConsoleStore:
    return InMemoryConsoleStore()


@pytest.fixture
def gpt_store() -> InMemoryConsoleStore:
    """Model ``gpt-4o`` with one provider whose catalog also offers unrelated names."""

    seeded = InMemoryConsoleStore()
    seeded.add_model(1, "gpt-4o")
    seeded.add_provider(10, "openai-main", upstream=["gpt-4o", "gpt-4o-mini"], custom=["GPT-4O"])
    return seeded


@pytest.fixture
def settings() -> ConsoleSettings:
    return ConsoleSettings()


@pytest.fixture
def sqlite_engine(tmp_path: Path) -> Iterator[Engine]:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'gateway.db'}")
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session_factory(sqlite_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=sqlite_engine, expire_on_commit=False)


@pytest.fixture
def started_adapter(sqlite_engine: Engine) -> Iterator[Engine]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield sqlite_engine
    finally:
        shutdown()
