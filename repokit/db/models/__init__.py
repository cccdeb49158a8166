"""
Declarative base and reusable model mixins.

Concrete models live with the application; they subclass ``Base`` and mix in
``RecordMixin`` (required for entity hydration), ``TimestampMixin`` and
optionally ``SoftDeleteMixin``.
"""

from .base import (
    Base,
    RecordMixin,
    SoftDeleteMixin,
    TimestampMixin,
    column_keys,
    is_soft_deletable,
    now_utc,
)

__all__ = [
    "Base",
    "now_utc",
    "RecordMixin",
    "TimestampMixin",
    "SoftDeleteMixin",
    "column_keys",
    "is_soft_deletable",
]
