"""
Entity base class.

An entity is a plain object whose state is read through ``get_*``/``is_*``
accessors and written through ``set_*`` mutators. The base class converts
between that accessor set and an ordered ``dict`` (or its JSON text), and
hydrates itself from ORM records or other entities.
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Protocol, Union, runtime_checkable

from repokit.config import strict_hydration_enabled
from repokit.entities.fields import describe
from repokit.errors import InvalidInputError

logger = logging.getLogger(__name__)

Identifier = Union[int, str]


@runtime_checkable
class EntityContract(Protocol):
    """Anything that can be serialized to a field map."""

    def to_map(self) -> Dict[str, Any]:
        ...


def _timestamp_text(value) -> Optional[str]:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class Entity:
    """Base class for entities mapped by naming convention.

    ``strict_hydration`` set to True/False overrides the
    ``REPOKIT_STRICT_HYDRATION`` setting for a subclass.
    """

    strict_hydration: Optional[bool] = None

    def __init__(self) -> None:
        self._id: Optional[Identifier] = None
        self._created_at: Optional[str] = None
        self._updated_at: Optional[str] = None

    def get_id(self) -> Optional[Identifier]:
        return self._id

    def set_id(self, value: Optional[Identifier]) -> None:
        self._id = value

    def get_created_at(self) -> str:
        return self._created_at or ""

    def set_created_at(self, value) -> None:
        self._created_at = _timestamp_text(value)

    def get_updated_at(self) -> str:
        return self._updated_at or ""

    def set_updated_at(self, value) -> None:
        self._updated_at = _timestamp_text(value)

    # === Serialization ===

    def to_map(self) -> Dict[str, Any]:
        """Return field name -> value for every accessor of this entity."""
        return {field.key: field.read(self) for field in describe(type(self))}

    def to_text(self) -> str:
        """JSON form of ``to_map()``; non-ASCII text is kept unescaped."""
        return json.dumps(self.to_map(), ensure_ascii=False, default=str)

    # === Hydration ===

    def _is_strict(self) -> bool:
        if self.strict_hydration is not None:
            return self.strict_hydration
        return strict_hydration_enabled()

    def from_map(self, data: Mapping[str, Any]):
        """Apply each key through its mutator and return ``self``.

        Mutators are looked up as ``set_<key>`` then ``set_is_<key>`` (camelCase
        ``set<Key>``/``setIs<Key>`` are accepted too). Keys without a mutator
        are skipped, or rejected when hydration is strict. Every key is
        resolved before any mutator runs, so a rejected map changes nothing.
        """
        table = describe(type(self))
        resolved = []
        unknown = []
        for key, value in data.items():
            setter = table.resolve_setter(key) if isinstance(key, str) else None
            if setter is None:
                unknown.append(key)
            else:
                resolved.append((setter, value))

        if unknown:
            if self._is_strict():
                raise InvalidInputError(
                    f"{type(self).__name__} has no mutator for keys {unknown!r}"
                )
            logger.debug(f"Ignoring unknown keys {unknown!r} for {type(self).__name__}")

        for setter, value in resolved:
            getattr(self, setter)(value)
        return self

    def from_entity(self, item: object):
        """Hydrate from anything exposing ``to_map()`` (entities, ORM records)."""
        if isinstance(item, type) or not callable(getattr(item, "to_map", None)):
            raise InvalidInputError(
                f"Object must implement to_map(), got {type(item).__name__}"
            )
        return self.from_map(item.to_map())

    def from_text(self, text: str):
        """Hydrate from JSON text.

        Text that does not decode to a JSON object hydrates from an empty map
        (a no-op) unless hydration is strict.
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            if self._is_strict():
                raise InvalidInputError(f"Cannot decode entity text: {e}") from e
            logger.debug(f"Undecodable text for {type(self).__name__}; hydrating from empty map")
            data = {}
        if not isinstance(data, dict):
            if self._is_strict():
                raise InvalidInputError(
                    f"Entity text must decode to an object, got {type(data).__name__}"
                )
            data = {}
        return self.from_map(data)

    # === Constructors ===

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        return cls().from_map(data)

    @classmethod
    def from_record(cls, item: object):
        return cls().from_entity(item)

    @classmethod
    def from_json(cls, text: str):
        return cls().from_text(text)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.to_map() == other.to_map()

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_map()!r})"
