"""
Generic repository facade.

Forwards lookups, writes, bulk and filter-object operations to a
persistence provider and returns entities instead of ORM records.
State-changing single-record operations publish
``{event_prefix}.entity.{action}`` through the injected notifier.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from repokit.config import default_per_page
from repokit.db.conditions import Conditions
from repokit.db.filters import QueryFilter
from repokit.db.provider import Payload, PersistenceProvider, SqlAlchemyProvider
from repokit.entities import Entity, Identifier
from repokit.errors import InvalidInputError, UnsupportedOperationError
from repokit.services.event_dispatcher import (
    EVENT_CREATED,
    EVENT_DELETED,
    EVENT_PERMANENTLY_DELETED,
    EVENT_RESTORED,
    EVENT_UPDATED,
    Notifier,
    entity_topic,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


class BaseRepository(Generic[E]):
    """
    Base repository; subclasses declare the model, entity and event prefix.

    Example:
        class ArticleRepository(BaseRepository[ArticleEntity]):
            model = Article
            entity = ArticleEntity
            event_prefix = "articles"
    """

    model: Any = None
    entity: Optional[Type[E]] = None
    event_prefix: str = ""

    def __init__(
        self,
        db: Session,
        notifier: Optional[Notifier] = None,
        provider: Optional[PersistenceProvider] = None,
    ):
        missing = [name for name in ("model", "entity", "event_prefix") if not getattr(self, name)]
        if missing:
            raise TypeError(f"{type(self).__name__} must declare {', '.join(missing)}")
        self.db = db
        self.notifier = notifier
        self.provider = provider if provider is not None else SqlAlchemyProvider(db, self.model)

    # === Conversion ===

    def convert_to_entity(self, item: Any) -> E:
        if isinstance(item, self.entity):
            return item
        return self.entity().from_entity(item)

    def _convert_all(self, items: Iterable[Any]) -> List[E]:
        return [self.convert_to_entity(item) for item in items]

    def _convert_optional(self, item: Any) -> Optional[E]:
        return self.convert_to_entity(item) if item is not None else None

    # === Lookups ===

    def find_by_id(self, id: Identifier) -> Optional[E]:
        """Find an entity by its primary key."""
        return self._convert_optional(self.provider.find(id))

    def find_one_by(self, conditions: Conditions) -> Optional[E]:
        """Find the first entity matching ``conditions``."""
        return self._convert_optional(self.provider.first(conditions))

    def find_all_by(self, conditions: Conditions) -> List[E]:
        return self._convert_all(self.provider.get(conditions))

    def find_all(self) -> List[E]:
        return self._convert_all(self.provider.get())

    def paginate(
        self,
        page: int,
        per_page: Optional[int] = None,
        conditions: Optional[Conditions] = None,
    ) -> List[E]:
        """Return one page of entities.

        ``page`` is 1-based and values below 1 mean page 1. ``per_page``
        defaults to the ``REPOKIT_DEFAULT_PER_PAGE`` setting.
        """
        if per_page is None:
            per_page = default_per_page()
        if per_page < 1:
            raise InvalidInputError(f"per_page must be at least 1, got {per_page!r}")
        page = max(int(page or 1), 1)
        return self._convert_all(self.provider.paginate(page, per_page, conditions))

    def find_by_callback(self, callback: Callable[[Any], Any]) -> List[E]:
        """Find entities with a callback that receives and returns the query."""
        return self._convert_all(self.provider.get_by_callback(callback))

    def find_trashed(self) -> List[E]:
        return self._convert_all(self.provider.get(only_trashed=True))

    def find_trashed_by_id(self, id: Identifier) -> Optional[E]:
        return self._convert_optional(self.provider.find(id, only_trashed=True))

    def exists(self, conditions: Conditions) -> bool:
        return self.provider.exists(conditions)

    def count(self, conditions: Optional[Conditions] = None) -> int:
        return self.provider.count(conditions)

    # === Mutations ===

    def create(self, data: Payload) -> E:
        """Insert a record and return it as an entity."""
        record = self.provider.create(data)
        entity = self.convert_to_entity(record)
        logger.info(f"Created {self.event_prefix} record {entity.get_id()}")
        self.dispatch_event(EVENT_CREATED, entity)
        return entity

    def update(self, id: Identifier, data: Payload) -> bool:
        """Update the record with ``id``; False when it does not exist."""
        record = self.provider.find(id)
        if record is None:
            logger.warning(f"{self.event_prefix} record {id} not found for update")
            return False
        record = self.provider.update(record, data)
        self.dispatch_event(EVENT_UPDATED, self.convert_to_entity(record))
        return True

    def delete(self, id: Identifier) -> bool:
        """Delete (soft delete when supported) the record with ``id``."""
        record = self.provider.find(id)
        if record is None:
            logger.warning(f"{self.event_prefix} record {id} not found for deletion")
            return False
        entity = self.convert_to_entity(record)
        self.provider.delete(record)
        logger.info(f"Deleted {self.event_prefix} record {id}")
        self.dispatch_event(EVENT_DELETED, entity)
        return True

    def restore(self, id: Identifier) -> Optional[E]:
        """Restore a soft-deleted record.

        Returns None when no record has ``id``. A record that is not trashed is
        returned as-is and no event is emitted.
        """
        if not self.provider.supports_soft_delete:
            raise UnsupportedOperationError(f"{self.event_prefix} records cannot be restored")
        record = self.provider.find(id, with_trashed=True)
        if record is None:
            logger.warning(f"{self.event_prefix} record {id} not found for restore")
            return None
        if record.deleted_at is None:
            return self.convert_to_entity(record)
        record = self.provider.restore(record)
        entity = self.convert_to_entity(record)
        logger.info(f"Restored {self.event_prefix} record {id}")
        self.dispatch_event(EVENT_RESTORED, entity)
        return entity

    def force_delete(self, id: Identifier) -> bool:
        """Permanently delete the record with ``id``, trashed or not."""
        record = self.provider.find(id, with_trashed=True)
        if record is None:
            logger.warning(f"{self.event_prefix} record {id} not found for permanent deletion")
            return False
        entity = self.convert_to_entity(record)
        self.provider.force_delete(record)
        logger.info(f"Permanently deleted {self.event_prefix} record {id}")
        self.dispatch_event(EVENT_PERMANENTLY_DELETED, entity)
        return True

    # === Bulk ===

    def bulk_create(self, records: Iterable[Payload]) -> List[E]:
        """Create records one by one in input order; earlier ones stay committed on failure."""
        return [self.create(record) for record in records]

    def bulk_update(self, conditions: Conditions, data: Payload) -> int:
        affected = self.provider.update_where(conditions, data)
        logger.info(f"Bulk updated {affected} {self.event_prefix} record(s)")
        return affected

    def bulk_delete(self, conditions: Conditions) -> int:
        affected = self.provider.delete_where(conditions)
        logger.info(f"Bulk deleted {affected} {self.event_prefix} record(s)")
        return affected

    # === Filter objects ===

    def filter(self, query_filter: QueryFilter) -> List[E]:
        return self._convert_all(self.provider.filter(query_filter))

    def count_by_filter(self, query_filter: QueryFilter) -> int:
        return self.provider.count_filter(query_filter)

    def update_by_filter(self, query_filter: QueryFilter, data: Payload) -> int:
        return self.provider.update_filter(query_filter, data)

    def delete_by_filter(self, query_filter: QueryFilter) -> int:
        return self.provider.delete_filter(query_filter)

    # === Events ===

    def dispatch_event(self, action: str, entity: E) -> None:
        if self.notifier is None:
            return
        self.notifier.dispatch(entity_topic(self.event_prefix, action), entity)
