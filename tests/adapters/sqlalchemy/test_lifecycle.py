from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, inspect

from routekeeper.adapters.sqlalchemy import (
    SqlAlchemyConsoleStore,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def reset_adapter_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_store_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyConsoleStore()


def test_startup_requires_force_for_reconfiguration(tmp_path: Path) -> None:
    engine_a = create_engine(f"sqlite+pysqlite:///{tmp_path / 'a.db'}")
    engine_b = create_engine(f"sqlite+pysqlite:///{tmp_path / 'b.db'}")

    startup(engine=engine_a)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_startup_creates_gateway_tables(tmp_path: Path) -> None:
    startup(database_uri=f"sqlite+pysqlite:///{tmp_path / 'gateway.db'}")

    engine = configured_engine()
    assert engine is not None
    assert set(inspect(engine).get_table_names()) >= {
        "providers",
        "models",
        "model_with_providers",
        "model_template_items",
    }
    assert SqlAlchemyConsoleStore().list_models() == []


def test_shutdown_resets_state(tmp_path: Path) -> None:
    startup(engine=create_engine(f"sqlite+pysqlite:///{tmp_path / 'x.db'}"))
    assert is_started()

    shutdown()

    assert not is_started()
    assert configured_engine() is None
