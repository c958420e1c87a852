"""Backend-neutral boolean predicate tree.

The compiler emits these nodes; query collaborators translate them into
their own expression language (SQLAlchemy clauses, Python callables, ...).

Leaves are ``Compare(field, op, value, type_)``; branches are ``And`` and
``Or`` over any number of children. ``type_`` is opaque to the core and
tells the collaborator how to cast the cursor value before comparing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from keyset_pagination.core.pagination.enums import Operator


@dataclass(frozen=True, slots=True)
class Compare:
    """``field <op> value``, optionally casting ``value`` to ``type_``."""

    field: Any
    op: Operator
    value: Any
    type_: Any = None


@dataclass(frozen=True, slots=True)
class And:
    children: tuple[Predicate, ...]


@dataclass(frozen=True, slots=True)
class Or:
    children: tuple[Predicate, ...]


Predicate = Compare | And | Or


def describe(predicate: Predicate) -> str:
    """Human-readable rendering used in debug logs and test failures."""
    match predicate:
        case Compare(field=field, op=op, value=value, type_=type_):
            cast = f"::{type_}" if type_ is not None else ""
            return f"{_field_label(field)} {op.value} {value!r}{cast}"
        case And(children=children):
            return "(" + " AND ".join(describe(c) for c in children) + ")"
        case Or(children=children):
            return "(" + " OR ".join(describe(c) for c in children) + ")"
    raise TypeError(f"Not a predicate node: {predicate!r}")


def _field_label(field: Any) -> str:
    key = getattr(field, "key", None)
    if isinstance(key, str):
        return key
    return field if isinstance(field, str) else repr(field)


__all__ = ["And", "Compare", "Or", "Predicate", "describe"]
