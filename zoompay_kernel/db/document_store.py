"""
Module: zoompay_kernel.db.document_store
Responsibility: The document-store boundary used by the lifecycle engine.
    ``DocumentStore`` is the protocol (create / get / update / delete / query
    over named collections of flat records); ``SqlDocumentStore`` implements
    it over SQLAlchemy ORM models, one table per collection.
Architecture position: Kernel > DB.  Imports db/base.py and exceptions only.
    Collections are registered by the caller (see
    ``zoompay_modules._orm_registry.document_collections``), so the kernel
    never imports module ORM classes.

Invariants enforced:
    - Records are plain dicts keyed by column name.  Unknown field names in a
      record, an update, a filter or an ordering raise ValueError before any
      SQL is issued.
    - ``update``/``delete`` with ``expected`` are compare-and-swap: the write
      only happens when every expected field still holds the given value,
      and the return value tells the caller whether it did.
    - Reads always refresh the identity map (populate_existing), so a record
      read after a conditional UPDATE reflects the database, not a stale
      in-session object.
    - Every SQLAlchemyError is re-raised as StoreUnavailableError.  The
      session is left for the caller to roll back.

Failure modes:
    - StoreUnavailableError on any database failure.
    - ValueError on an unknown collection or field (programming error).
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import delete, inspect, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from zoompay_kernel.db.base import Base
from zoompay_kernel.exceptions import StoreUnavailableError
from zoompay_kernel.logging_config import get_logger

logger = get_logger("db.document_store")

Record = dict[str, Any]

# Database-maintained audit column; never part of a record.
_HIDDEN_FIELDS = frozenset({"updated_at"})


@dataclass(frozen=True)
class Filter:
    """One query predicate: ``field == value`` or ``field in value``."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in ("==", "in"):
            raise ValueError(f"Unsupported filter operator: {self.op!r}")
        if self.op == "in" and isinstance(self.value, (str, bytes)):
            raise ValueError("'in' filter needs a collection of values")


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = True


class DocumentStore(Protocol):
    """What the lifecycle engine needs from a document database."""

    def create(self, collection: str, record: Mapping[str, Any]) -> UUID: ...

    def get(
        self, collection: str, record_id: UUID, for_update: bool = False
    ) -> Record | None: ...

    def update(
        self,
        collection: str,
        record_id: UUID,
        fields: Mapping[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> bool: ...

    def delete(
        self,
        collection: str,
        record_id: UUID,
        expected: Mapping[str, Any] | None = None,
    ) -> bool: ...

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Record]: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class SqlDocumentStore:
    """
    DocumentStore over SQLAlchemy ORM models.

    Contract:
        One instance wraps one Session.  The store never commits on its own;
        callers (services) own the transaction boundary and call
        ``commit()``/``rollback()``.
    """

    def __init__(self, session: Session, collections: Mapping[str, type[Base]]):
        self._session = session
        self._collections = dict(collections)

    @property
    def session(self) -> Session:
        return self._session

    # -- helpers -------------------------------------------------------------

    def _model(self, collection: str) -> type[Base]:
        try:
            return self._collections[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection!r}") from None

    @staticmethod
    def _fields_of(model: type[Base]) -> tuple[str, ...]:
        return tuple(
            attr.key
            for attr in inspect(model).column_attrs
            if attr.key not in _HIDDEN_FIELDS
        )

    def _column(self, model: type[Base], name: str):
        if name not in self._fields_of(model):
            raise ValueError(f"Unknown field {name!r} for {model.__tablename__}")
        return getattr(model, name)

    def _check_fields(self, model: type[Base], names) -> None:
        allowed = self._fields_of(model)
        unknown = sorted(set(names) - set(allowed))
        if unknown:
            raise ValueError(
                f"Unknown field(s) {unknown} for {model.__tablename__}"
            )

    def _to_record(self, obj: Base) -> Record:
        return {
            name: copy.deepcopy(getattr(obj, name))
            for name in self._fields_of(type(obj))
        }

    def _fail(self, operation: str, collection: str, exc: Exception) -> StoreUnavailableError:
        logger.error(
            "document_store_failed",
            extra={
                "operation": operation,
                "collection": collection,
                "error": str(exc),
            },
        )
        return StoreUnavailableError("document", operation, str(exc))

    # -- protocol ------------------------------------------------------------

    def create(self, collection: str, record: Mapping[str, Any]) -> UUID:
        model = self._model(collection)
        self._check_fields(model, record)
        try:
            obj = model(**copy.deepcopy(dict(record)))
            self._session.add(obj)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise self._fail("create", collection, exc) from exc
        logger.debug(
            "document_created",
            extra={"collection": collection, "record_id": str(obj.id)},
        )
        return obj.id

    def get(
        self, collection: str, record_id: UUID, for_update: bool = False
    ) -> Record | None:
        model = self._model(collection)
        stmt = (
            select(model)
            .where(model.id == record_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        try:
            obj = self._session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._fail("get", collection, exc) from exc
        return self._to_record(obj) if obj is not None else None

    def update(
        self,
        collection: str,
        record_id: UUID,
        fields: Mapping[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> bool:
        model = self._model(collection)
        self._check_fields(model, fields)
        if "id" in fields:
            raise ValueError("The id of a document cannot be updated")
        conditions = [model.id == record_id]
        for name, value in (expected or {}).items():
            column = self._column(model, name)
            conditions.append(column.is_(None) if value is None else column == value)
        stmt = (
            update(model)
            .where(*conditions)
            .values(**copy.deepcopy(dict(fields)))
            .execution_options(synchronize_session=False)
        )
        try:
            result = self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise self._fail("update", collection, exc) from exc
        applied = result.rowcount == 1
        if not applied:
            logger.info(
                "conditional_update_missed",
                extra={
                    "collection": collection,
                    "record_id": str(record_id),
                    "expected": dict(expected or {}),
                },
            )
        return applied

    def delete(
        self,
        collection: str,
        record_id: UUID,
        expected: Mapping[str, Any] | None = None,
    ) -> bool:
        model = self._model(collection)
        conditions = [model.id == record_id]
        for name, value in (expected or {}).items():
            conditions.append(self._column(model, name) == value)
        stmt = delete(model).where(*conditions).execution_options(
            synchronize_session=False
        )
        try:
            result = self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise self._fail("delete", collection, exc) from exc
        return result.rowcount == 1

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        model = self._model(collection)
        stmt = select(model).execution_options(populate_existing=True)
        for f in filters:
            column = self._column(model, f.field)
            if f.op == "in":
                stmt = stmt.where(column.in_(list(f.value)))
            else:
                stmt = stmt.where(column.is_(None) if f.value is None else column == f.value)
        if order_by is not None:
            column = self._column(model, order_by.field)
            stmt = stmt.order_by(column.desc() if order_by.descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            rows = self._session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise self._fail("query", collection, exc) from exc
        return [self._to_record(obj) for obj in rows]

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("commit", "*", exc) from exc

    def rollback(self) -> None:
        self._session.rollback()
