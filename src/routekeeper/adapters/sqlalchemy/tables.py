"""
SQLAlchemy Core tables mirroring the gateway database.

Association rows reference providers and models by id only; orphans are
representable so that reconciliation can clean them up.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

provider_table = Table(
    "providers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("type", String, nullable=False, default=""),
    Column("config", Text, nullable=False, default=""),
)

model_table = Table(
    "models",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False, unique=True),
    Column("remark", String, nullable=False, default=""),
)

association_table = Table(
    "model_with_providers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("model_id", Integer, nullable=False, index=True),
    Column("provider_id", Integer, nullable=False, index=True),
    Column("provider_model", String, nullable=False),
    Column("tool_call", Boolean),
    Column("structured_output", Boolean),
    Column("image", Boolean),
    Column("with_header", Boolean),
    Column("status", Boolean),
    Column("weight", Integer, nullable=False, default=1),
    Column("priority", Integer, nullable=False, default=0),
    Column("customer_headers", Text, nullable=False, default="{}"),
)

template_item_table = Table(
    "model_template_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("model_id", Integer, nullable=False, index=True),
    Column("name", String, nullable=False),
    UniqueConstraint("model_id", "name"),
)


def create_all_tables(engine: Engine) -> None:
    """Create the gateway tables that do not exist yet."""

    log.info("Creating all tables")
    metadata.create_all(engine)
