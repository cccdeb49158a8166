"""
Filter objects: reusable query refinements passed to repositories.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class QueryFilter(Protocol):
    def apply(self, query):
        """Return ``query`` narrowed by this filter."""
        ...


class BaseQueryFilter:
    """Dispatches each filter parameter to the method of the same name.

    Subclasses define one method per supported parameter::

        class ArticleFilter(BaseQueryFilter):
            def status(self, query, value):
                return query.filter(Article.status == value)

    Parameters without a matching method, and parameters whose value is
    None, are ignored.
    """

    _reserved = frozenset({"apply", "params"})

    def __init__(self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        merged = dict(params or {})
        merged.update(kwargs)
        self.params = merged

    def apply(self, query):
        for name, value in self.params.items():
            if value is None:
                continue
            handler = self._handler(name)
            if handler is None:
                logger.debug(f"{type(self).__name__} ignores parameter {name!r}")
                continue
            query = handler(query, value)
        return query

    def _handler(self, name):
        if not isinstance(name, str) or name.startswith("_") or name in self._reserved:
            return None
        handler = getattr(self, name, None)
        return handler if callable(handler) else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.params!r})"


__all__ = ["QueryFilter", "BaseQueryFilter"]
