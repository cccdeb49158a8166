"""
Entities and the naming-convention mapper.

Re-exports the base class and the field table helpers.
"""

from .base import Entity, EntityContract, Identifier
from .fields import EntityField, FieldTable, describe, setter_candidates, split_accessor

__all__ = [
    "Entity",
    "EntityContract",
    "Identifier",
    "EntityField",
    "FieldTable",
    "describe",
    "setter_candidates",
    "split_accessor",
]
