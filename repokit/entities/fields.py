"""
Accessor/mutator discovery for entity classes.

Entities expose their state through naming conventions: zero-argument
``get*``/``is*`` accessors produce map entries and ``set*`` mutators consume
them. The conventions are resolved once per class into an explicit field
table so serialization and hydration never re-inspect the class.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterator, Literal, Optional, Tuple
from weakref import WeakKeyDictionary

AccessorKind = Literal["get", "is"]

_ACCESSOR_PREFIXES: Tuple[Tuple[str, AccessorKind], ...] = (("get", "get"), ("is", "is"))


@dataclass(frozen=True)
class EntityField:
    key: str
    accessor: str
    kind: AccessorKind

    def read(self, instance) -> object:
        return getattr(instance, self.accessor)()


@dataclass(frozen=True)
class FieldTable:
    fields: Tuple[EntityField, ...]
    setters: FrozenSet[str]

    def __iter__(self) -> Iterator[EntityField]:
        return iter(self.fields)

    def keys(self) -> Tuple[str, ...]:
        return tuple(f.key for f in self.fields)

    def resolve_setter(self, key: str) -> Optional[str]:
        """Return the name of the mutator that accepts ``key``, if any."""
        for candidate in setter_candidates(key):
            if candidate in self.setters:
                return candidate
        return None


def lcfirst(value: str) -> str:
    return value[:1].lower() + value[1:]


def ucfirst(value: str) -> str:
    return value[:1].upper() + value[1:]


def split_accessor(name: str) -> Optional[Tuple[str, AccessorKind]]:
    """Return ``(key, kind)`` for an accessor name, or None.

    ``get_title``/``getTitle`` -> ``title``; ``is_active``/``isActive`` ->
    ``active``. The prefix must be followed by ``_`` or an upper-case letter.
    """
    for prefix, kind in _ACCESSOR_PREFIXES:
        if not name.startswith(prefix):
            continue
        rest = name[len(prefix):]
        if rest.startswith("_"):
            rest = rest[1:]
        elif not rest[:1].isupper():
            continue
        if not rest:
            continue
        return lcfirst(rest), kind
    return None


def setter_candidates(key: str) -> Tuple[str, ...]:
    """Mutator names tried for ``key``, in priority order."""
    return (
        f"set_{key}",
        f"set{ucfirst(key)}",
        f"set_is_{key}",
        f"setIs{ucfirst(key)}",
    )


def _required_positional_count(func: Callable) -> int:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return -1
    required = 0
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.default is param.empty:
            required += 1
    return required


def _is_accessor(attr) -> bool:
    # Plain instance methods only; properties/static/class methods are skipped.
    if not inspect.isfunction(attr):
        return False
    return _required_positional_count(attr) == 1  # self


def _is_mutator(attr) -> bool:
    # self plus exactly one value
    if not inspect.isfunction(attr):
        return False
    try:
        inspect.signature(attr).bind(None, None)
    except (TypeError, ValueError):
        return False
    return True


def _names_in_definition_order(cls: type) -> Iterator[str]:
    seen = set()
    for klass in reversed(cls.__mro__):
        for name in vars(klass):
            if name not in seen:
                seen.add(name)
                yield name


_TABLES: "WeakKeyDictionary[type, FieldTable]" = WeakKeyDictionary()


def describe(cls: type) -> FieldTable:
    """Return the field table for an entity class, building it on first use."""
    table = _TABLES.get(cls)
    if table is None:
        table = _TABLES[cls] = _build_table(cls)
    return table


def _build_table(cls: type) -> FieldTable:
    fields: Dict[str, EntityField] = {}
    setters = set()
    for name in _names_in_definition_order(cls):
        if name.startswith("_"):
            continue
        attr = inspect.getattr_static(cls, name)
        if name.startswith("set") and _is_mutator(attr):
            setters.add(name)
            continue
        parsed = split_accessor(name)
        if parsed is None or not _is_accessor(attr):
            continue
        key, kind = parsed
        fields[key] = EntityField(key=key, accessor=name, kind=kind)
    return FieldTable(fields=tuple(fields.values()), setters=frozenset(setters))


__all__ = [
    "EntityField",
    "FieldTable",
    "describe",
    "setter_candidates",
    "split_accessor",
]
