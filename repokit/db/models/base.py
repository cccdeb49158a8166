"""
Shared SQLAlchemy base and model mixins.
"""
from datetime import datetime, UTC
from typing import Any, Dict

from sqlalchemy import Column, DateTime, inspect as sa_inspect
from sqlalchemy.orm import declarative_base, declared_attr


def now_utc():
    """Return an aware UTC datetime for default/updated timestamps."""
    return datetime.now(UTC)


Base = declarative_base()


class RecordMixin:
    """Gives ORM records the ``to_map()`` capability entities hydrate from."""

    def to_map(self) -> Dict[str, Any]:
        mapper = sa_inspect(type(self))
        return {attr.key: getattr(self, attr.key) for attr in mapper.column_attrs}


class TimestampMixin:
    @declared_attr
    def created_at(cls):
        return Column(DateTime(timezone=True), default=now_utc)

    @declared_attr
    def updated_at(cls):
        return Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)


class SoftDeleteMixin:
    """Marks a model as soft-deletable: deleting stamps ``deleted_at``."""

    @declared_attr
    def deleted_at(cls):
        return Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def trashed(self) -> bool:
        return self.deleted_at is not None


def is_soft_deletable(model_class) -> bool:
    return "deleted_at" in sa_inspect(model_class).columns


def column_keys(model_class) -> frozenset:
    """Mapped column attribute names of a model."""
    return frozenset(attr.key for attr in sa_inspect(model_class).column_attrs)
