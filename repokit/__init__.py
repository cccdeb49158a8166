"""
repokit: generic repositories and convention-mapped entities over SQLAlchemy.
"""

from repokit.db.filters import BaseQueryFilter, QueryFilter
from repokit.db.provider import PersistenceProvider, SqlAlchemyProvider
from repokit.entities import Entity, EntityContract
from repokit.errors import (
    ConfigurationError,
    InvalidInputError,
    RepokitError,
    RepositoryError,
    UnsupportedOperationError,
)
from repokit.repositories import BaseRepository
from repokit.services import EventDispatcher, Notifier

__version__ = "0.1.0"

__all__ = [
    "BaseQueryFilter",
    "BaseRepository",
    "ConfigurationError",
    "Entity",
    "EntityContract",
    "EventDispatcher",
    "InvalidInputError",
    "Notifier",
    "PersistenceProvider",
    "QueryFilter",
    "RepokitError",
    "RepositoryError",
    "SqlAlchemyProvider",
    "UnsupportedOperationError",
]
