"""
Persistence providers.

``PersistenceProvider`` is the capability set repositories rely on;
``SqlAlchemyProvider`` implements it over a SQLAlchemy session and one
declarative model class. Soft delete is enabled when the model has a
``deleted_at`` column: default queries then hide trashed rows.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Union

from pydantic import BaseModel
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from repokit.db.conditions import Conditions, apply_conditions
from repokit.db.filters import QueryFilter
from repokit.db.models import column_keys, is_soft_deletable, now_utc
from repokit.errors import InvalidInputError, RepositoryError, UnsupportedOperationError

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], BaseModel]


def normalize_payload(data: Payload) -> Dict[str, Any]:
    """Return a plain dict from a mapping or a pydantic model (unset fields dropped)."""
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    if isinstance(data, Mapping):
        return dict(data)
    raise InvalidInputError(f"Expected a mapping or pydantic model, got {type(data).__name__}")


class PersistenceProvider(Protocol):
    supports_soft_delete: bool

    def find(self, record_id, *, with_trashed: bool = False, only_trashed: bool = False): ...

    def first(self, conditions: Optional[Conditions]): ...

    def get(self, conditions: Optional[Conditions] = None, *, only_trashed: bool = False) -> List[Any]: ...

    def get_by_callback(self, callback: Callable[[Any], Any]) -> List[Any]: ...

    def paginate(self, page: int, per_page: int, conditions: Optional[Conditions] = None) -> List[Any]: ...

    def create(self, data: Payload): ...

    def update(self, record, data: Payload): ...

    def delete(self, record) -> None: ...

    def restore(self, record): ...

    def force_delete(self, record) -> None: ...

    def exists(self, conditions: Optional[Conditions]) -> bool: ...

    def count(self, conditions: Optional[Conditions] = None) -> int: ...

    def update_where(self, conditions: Optional[Conditions], data: Payload) -> int: ...

    def delete_where(self, conditions: Optional[Conditions]) -> int: ...

    def filter(self, query_filter: QueryFilter) -> List[Any]: ...

    def count_filter(self, query_filter: QueryFilter) -> int: ...

    def update_filter(self, query_filter: QueryFilter, data: Payload) -> int: ...

    def delete_filter(self, query_filter: QueryFilter) -> int: ...


class SqlAlchemyProvider:
    """Persistence provider backed by a SQLAlchemy session."""

    def __init__(self, db: Session, model_class):
        self.db = db
        self.model_class = model_class
        self.supports_soft_delete = is_soft_deletable(model_class)
        self._columns = column_keys(model_class)
        self._pk = sa_inspect(model_class).primary_key[0]

    # === Query building ===

    def query(self, *, with_trashed: bool = False, only_trashed: bool = False) -> Query:
        q = self.db.query(self.model_class)
        if only_trashed and not self.supports_soft_delete:
            raise UnsupportedOperationError(
                f"{self.model_class.__name__} does not support soft delete"
            )
        if self.supports_soft_delete:
            deleted_at = self.model_class.deleted_at
            if only_trashed:
                q = q.filter(deleted_at.is_not(None))
            elif not with_trashed:
                q = q.filter(deleted_at.is_(None))
        return q

    def _ordered(self, q: Query) -> Query:
        return q.order_by(self._pk)

    def _filtered(self, query_filter: QueryFilter) -> Query:
        if not callable(getattr(query_filter, "apply", None)):
            raise InvalidInputError(
                f"Filter must provide apply(query), got {type(query_filter).__name__}"
            )
        return query_filter.apply(self.query())

    def _columns_only(self, data: Payload) -> Dict[str, Any]:
        payload = normalize_payload(data)
        dropped = [key for key in payload if key not in self._columns]
        if dropped:
            logger.debug(f"Dropping non-column keys {dropped} for {self.model_class.__name__}")
        return {key: value for key, value in payload.items() if key in self._columns}

    @contextmanager
    def _writing(self, action: str):
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error during {action} on {self.model_class.__name__}: {e}")
            raise RepositoryError(f"Failed to {action} {self.model_class.__name__}: {e}") from e

    # === Reads ===

    def find(self, record_id, *, with_trashed: bool = False, only_trashed: bool = False):
        if record_id is None:
            return None
        q = self.query(with_trashed=with_trashed, only_trashed=only_trashed)
        return q.filter(self._pk == record_id).first()

    def first(self, conditions: Optional[Conditions]):
        return self._ordered(apply_conditions(self.query(), self.model_class, conditions)).first()

    def get(self, conditions: Optional[Conditions] = None, *, only_trashed: bool = False) -> List[Any]:
        q = apply_conditions(self.query(only_trashed=only_trashed), self.model_class, conditions)
        return self._ordered(q).all()

    def get_by_callback(self, callback: Callable[[Any], Any]) -> List[Any]:
        q = callback(self.query())
        if q is None:
            raise InvalidInputError("Query callback must return the refined query")
        return self._ordered(q).all()

    def paginate(self, page: int, per_page: int, conditions: Optional[Conditions] = None) -> List[Any]:
        q = apply_conditions(self.query(), self.model_class, conditions)
        return self._ordered(q).offset((page - 1) * per_page).limit(per_page).all()

    def exists(self, conditions: Optional[Conditions]) -> bool:
        q = apply_conditions(self.query(), self.model_class, conditions)
        return bool(self.db.query(q.exists()).scalar())

    def count(self, conditions: Optional[Conditions] = None) -> int:
        return apply_conditions(self.query(), self.model_class, conditions).count()

    def filter(self, query_filter: QueryFilter) -> List[Any]:
        return self._ordered(self._filtered(query_filter)).all()

    def count_filter(self, query_filter: QueryFilter) -> int:
        return self._filtered(query_filter).count()

    # === Writes ===

    def create(self, data: Payload):
        record = self.model_class(**self._columns_only(data))
        with self._writing("create"):
            self.db.add(record)
        self.db.refresh(record)
        return record

    def update(self, record, data: Payload):
        with self._writing("update"):
            for key, value in self._columns_only(data).items():
                setattr(record, key, value)
        self.db.refresh(record)
        return record

    def delete(self, record) -> None:
        with self._writing("delete"):
            if self.supports_soft_delete:
                record.deleted_at = now_utc()
            else:
                self.db.delete(record)

    def restore(self, record):
        if not self.supports_soft_delete:
            raise UnsupportedOperationError(
                f"{self.model_class.__name__} does not support soft delete"
            )
        with self._writing("restore"):
            record.deleted_at = None
        self.db.refresh(record)
        return record

    def force_delete(self, record) -> None:
        with self._writing("force delete"):
            self.db.delete(record)

    def _update_query(self, q: Query, data: Payload, action: str) -> int:
        values = self._columns_only(data)
        if not values:
            return 0
        with self._writing(action):
            affected = q.update(values, synchronize_session="fetch")
        return affected

    def _delete_query(self, q: Query, action: str) -> int:
        with self._writing(action):
            if self.supports_soft_delete:
                affected = q.update({"deleted_at": now_utc()}, synchronize_session="fetch")
            else:
                affected = q.delete(synchronize_session="fetch")
        return affected

    def update_where(self, conditions: Optional[Conditions], data: Payload) -> int:
        q = apply_conditions(self.query(), self.model_class, conditions)
        return self._update_query(q, data, "bulk update")

    def delete_where(self, conditions: Optional[Conditions]) -> int:
        q = apply_conditions(self.query(), self.model_class, conditions)
        return self._delete_query(q, "bulk delete")

    def update_filter(self, query_filter: QueryFilter, data: Payload) -> int:
        return self._update_query(self._filtered(query_filter), data, "update by filter")

    def delete_filter(self, query_filter: QueryFilter) -> int:
        return self._delete_query(self._filtered(query_filter), "delete by filter")


__all__ = ["Payload", "PersistenceProvider", "SqlAlchemyProvider", "normalize_payload"]
