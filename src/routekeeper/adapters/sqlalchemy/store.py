"""``ConsoleStore`` backed by a gateway database through SQLAlchemy Core."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError

from routekeeper.adapters.provider_config import parse_catalog
from routekeeper.domain.errors import (
    AliasNotFoundError,
    AssociationNotFoundError,
    DuplicateAliasError,
    StalePreviewError,
)
from routekeeper.domain.model import (
    Association,
    Capabilities,
    ManualAlias,
    Model,
    Provider,
)

from .lifecycle import current_session_factory
from .tables import association_table, model_table, provider_table, template_item_table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Row
    from sqlalchemy.orm import Session, sessionmaker

    from routekeeper.domain.model import AssociationSpec
    from routekeeper.domain.ports import ConsoleStore

log = getLogger(__name__)


def _row_to_association(row: Row[Any]) -> Association:
    return Association(
        id=row.id,
        model_id=row.model_id,
        provider_id=row.provider_id,
        provider_model=row.provider_model,
        capabilities=Capabilities(
            tool_call=bool(row.tool_call),
            structured_output=bool(row.structured_output),
            image=bool(row.image),
            with_header=bool(row.with_header),
        ),
        weight=row.weight,
        priority=row.priority,
        enabled=row.status is None or bool(row.status),
    )


class SqlAlchemyConsoleStore:
    """Each call runs in its own transaction."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        if session_factory is None:
            session_factory = current_session_factory()
        self.session_factory = session_factory

    def list_providers(self) -> list[Provider]:
        stmt = select(provider_table).order_by(provider_table.c.id)
        with self.session_factory() as session:
            rows = session.execute(stmt).all()
        return [
            Provider(id=row.id, name=row.name, type=row.type, catalog=parse_catalog(row.config))
            for row in rows
        ]

    def list_models(self) -> list[Model]:
        stmt = select(model_table).order_by(model_table.c.id)
        with self.session_factory() as session:
            rows = session.execute(stmt).all()
        return [Model(id=row.id, name=row.name, remark=row.remark or "") for row in rows]

    def list_associations(self, model_id: int | None = None) -> list[Association]:
        stmt = select(association_table).order_by(association_table.c.id)
        if model_id is not None:
            stmt = stmt.where(association_table.c.model_id == model_id)
        with self.session_factory() as session:
            rows = session.execute(stmt).all()
        return [_row_to_association(row) for row in rows]

    def create_association(self, spec: AssociationSpec) -> Association:
        values = {
            "model_id": spec.model_id,
            "provider_id": spec.provider_id,
            "provider_model": spec.provider_model,
            "tool_call": spec.capabilities.tool_call,
            "structured_output": spec.capabilities.structured_output,
            "image": spec.capabilities.image,
            "with_header": spec.capabilities.with_header,
            "status": spec.enabled,
            "weight": spec.weight,
            "priority": spec.priority,
        }
        with self.session_factory.begin() as session:
            result = session.execute(insert(association_table).values(**values))
            (new_id,) = result.inserted_primary_key or (None,)
            row = session.execute(
                select(association_table).where(association_table.c.id == new_id)
            ).one()
            association = _row_to_association(row)
        log.debug(f"Inserted association {association.id}")
        return association

    def delete_association(self, association_id: int) -> None:
        stmt = delete(association_table).where(association_table.c.id == association_id)
        with self.session_factory.begin() as session:
            deleted = session.execute(stmt).rowcount
        if not deleted:
            raise StalePreviewError(f"Association {association_id} no longer exists")

    def batch_delete_associations(self, association_ids: Sequence[int]) -> int:
        if not association_ids:
            return 0
        stmt = delete(association_table).where(association_table.c.id.in_(list(association_ids)))
        with self.session_factory.begin() as session:
            return session.execute(stmt).rowcount

    def set_association_enabled(self, association_id: int, enabled: bool) -> Association:
        with self.session_factory.begin() as session:
            updated = session.execute(
                update(association_table)
                .where(association_table.c.id == association_id)
                .values(status=enabled)
            ).rowcount
            if not updated:
                raise AssociationNotFoundError(association_id)
            row = session.execute(
                select(association_table).where(association_table.c.id == association_id)
            ).one()
            return _row_to_association(row)

    def list_manual_aliases(self, model_id: int | None = None) -> list[ManualAlias]:
        stmt = select(template_item_table).order_by(
            template_item_table.c.model_id, template_item_table.c.id
        )
        if model_id is not None:
            stmt = stmt.where(template_item_table.c.model_id == model_id)
        with self.session_factory() as session:
            rows = session.execute(stmt).all()
        return [ManualAlias(model_id=row.model_id, alias=row.name) for row in rows]

    def add_manual_alias(self, model_id: int, alias: str) -> None:
        try:
            with self.session_factory.begin() as session:
                session.execute(insert(template_item_table).values(model_id=model_id, name=alias))
        except IntegrityError as exc:
            raise DuplicateAliasError(model_id, alias) from exc

    def remove_manual_alias(self, model_id: int, alias: str) -> None:
        stmt = (
            delete(template_item_table)
            .where(template_item_table.c.model_id == model_id)
            .where(template_item_table.c.name == alias)
        )
        with self.session_factory.begin() as session:
            deleted = session.execute(stmt).rowcount
        if not deleted:
            raise AliasNotFoundError(model_id, alias)


if TYPE_CHECKING:
    _store_check: ConsoleStore = SqlAlchemyConsoleStore()
