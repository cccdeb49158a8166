"""
Translate condition arguments into SQLAlchemy criteria.

Conditions are either an equality mapping (``{"status": "draft"}``) or a
sequence of ``(column, operator, value)`` triples
(``[("views", ">=", 10), ("title", "like", "%intro%")]``).
"""
from __future__ import annotations

import operator
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import inspect as sa_inspect

from repokit.errors import InvalidInputError

ConditionTriple = Tuple[str, str, Any]
Conditions = Union[Mapping[str, Any], Sequence[ConditionTriple]]


def _members(value) -> list:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise InvalidInputError(f"'in' conditions need a collection of values, got {value!r}")
    return list(value)


_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "=": operator.eq,
    "==": operator.eq,
    "!=": operator.ne,
    "<>": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "like": lambda col, value: col.like(value),
    "ilike": lambda col, value: col.ilike(value),
    "in": lambda col, value: col.in_(_members(value)),
    "not in": lambda col, value: col.not_in(_members(value)),
}


def _column(model_class, name: str):
    if not isinstance(name, str) or name not in sa_inspect(model_class).columns:
        raise InvalidInputError(f"Unknown column {name!r} for {model_class.__name__}")
    return getattr(model_class, name)


def _equality(col, value):
    if value is None:
        return col.is_(None)
    return col == value


def build_criteria(model_class, conditions: Optional[Conditions]) -> List[Any]:
    """Return a list of SQLAlchemy criteria for ``conditions`` (AND-ed by callers)."""
    if not conditions:
        return []
    if isinstance(conditions, Mapping):
        return [_equality(_column(model_class, key), value) for key, value in conditions.items()]
    if isinstance(conditions, (str, bytes)):
        raise InvalidInputError("Conditions must be a mapping or a sequence of triples")

    criteria = []
    for triple in conditions:
        if not isinstance(triple, (tuple, list)) or len(triple) != 3:
            raise InvalidInputError(f"Condition must be a (column, operator, value) triple, got {triple!r}")
        name, op, value = triple
        col = _column(model_class, name)
        op_key = str(op).strip().lower()
        if op_key not in _OPERATORS:
            raise InvalidInputError(f"Unsupported condition operator {op!r}")
        if op_key in ("=", "==") and value is None:
            criteria.append(col.is_(None))
        elif op_key in ("!=", "<>") and value is None:
            criteria.append(col.is_not(None))
        else:
            criteria.append(_OPERATORS[op_key](col, value))
    return criteria


def apply_conditions(query, model_class, conditions: Optional[Conditions]):
    criteria = build_criteria(model_class, conditions)
    return query.filter(*criteria) if criteria else query


__all__ = ["Conditions", "ConditionTriple", "apply_conditions", "build_criteria"]
