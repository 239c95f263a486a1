"""Generic record storage over the Linkboard collections."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from linkboard.db.session import Base
from linkboard.models import AuthSession, Comment, Post, User, Vote
from linkboard.services.change_feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeKind,
    Subscription,
    get_change_feed,
)
from linkboard.services.errors import ConstraintViolation, PersistenceError

__all__ = ["COLLECTIONS", "RecordStore", "snapshot"]

logger = logging.getLogger(__name__)

COLLECTIONS: dict[str, type[Base]] = {
    "users": User,
    "posts": Post,
    "comments": Comment,
    "votes": Vote,
    "auth_sessions": AuthSession,
}


# Never copied into change events.
_PRIVATE_FIELDS = frozenset({"password_hash"})


def snapshot(record: Base) -> dict[str, Any]:
    """Return the public column values of an ORM instance as a plain dict."""
    return {
        column.key: getattr(record, column.key)
        for column in record.__table__.columns
        if column.key not in _PRIVATE_FIELDS
    }


class RecordStore:
    """Thin wrapper around a SQLAlchemy session exposing per-collection CRUD.

    Mutations are flushed immediately so database constraints fire inside the
    call, but change events are only published once ``commit`` succeeds.
    """

    def __init__(self, session: Session, feed: ChangeFeed | None = None) -> None:
        """Initialize the store with a SQLAlchemy session and a change feed."""
        self.session = session
        self.feed = feed or get_change_feed()
        self._pending: list[ChangeEvent] = []

    def _model(self, collection: str) -> type[Base]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise KeyError(f"Unknown collection: {collection}") from None

    @staticmethod
    def _check_fields(model: type[Base], names: Iterable[str]) -> None:
        columns = model.__table__.columns
        for name in names:
            if name not in columns:
                raise KeyError(f"{model.__tablename__} has no field {name!r}")

    def find(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Any]:
        """Return records of ``collection`` whose fields equal ``filters``."""
        model = self._model(collection)
        filters = dict(filters or {})
        self._check_fields(model, filters)
        stmt = select(model).filter_by(**filters)
        if order_by is not None:
            self._check_fields(model, [order_by])
            column = model.__table__.columns[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            return list(self.session.execute(stmt).unique().scalars())
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to read {collection}") from exc

    def find_one(self, collection: str, filters: Mapping[str, Any]) -> Any | None:
        """Return the single record matching ``filters`` or None."""
        records = self.find(collection, filters, limit=1)
        return records[0] if records else None

    def insert(self, collection: str, values: Mapping[str, Any]) -> Any:
        """Insert a record and return the persisted ORM instance."""
        model = self._model(collection)
        self._check_fields(model, values)
        record = model(**values)
        try:
            self.session.add(record)
            self.session.flush()
        except IntegrityError as exc:
            raise ConstraintViolation(f"Constraint violated inserting into {collection}") from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to insert into {collection}") from exc
        self._pending.append(ChangeEvent(collection, ChangeKind.INSERT, snapshot(record)))
        return record

    def update(
        self,
        collection: str,
        filters: Mapping[str, Any],
        patch: Mapping[str, Any],
    ) -> int:
        """Apply ``patch`` to every matching record; return the number updated."""
        model = self._model(collection)
        self._check_fields(model, patch)
        records = self.find(collection, filters)
        try:
            for record in records:
                for key, value in patch.items():
                    setattr(record, key, value)
            self.session.flush()
        except IntegrityError as exc:
            raise ConstraintViolation(f"Constraint violated updating {collection}") from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to update {collection}") from exc
        self._pending.extend(
            ChangeEvent(collection, ChangeKind.UPDATE, snapshot(record)) for record in records
        )
        return len(records)

    def delete(self, collection: str, filters: Mapping[str, Any]) -> int:
        """Delete every matching record; return the number removed."""
        records = self.find(collection, filters)
        events = [ChangeEvent(collection, ChangeKind.DELETE, snapshot(r)) for r in records]
        try:
            for record in records:
                self.session.delete(record)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to delete from {collection}") from exc
        self._pending.extend(events)
        return len(records)

    def commit(self) -> None:
        """Commit the unit of work and publish its change events."""
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError("Commit failed") from exc
        events, self._pending = self._pending, []
        if events:
            logger.debug("Publishing %d change event(s)", len(events))
            self.feed.publish(events)

    def rollback(self) -> None:
        """Discard the unit of work; nothing is published."""
        self._pending = []
        self.session.rollback()

    @contextmanager
    def transaction(self) -> Iterator[RecordStore]:
        """Commit on success, roll back and re-raise on any error."""
        try:
            yield self
            self.commit()
        except Exception:
            self.rollback()
            raise

    def subscribe(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
    ) -> Subscription:
        """Subscribe to committed changes of ``collection`` matching ``filter``."""
        self._model(collection)
        return self.feed.subscribe(collection, filter)
