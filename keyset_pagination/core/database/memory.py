"""In-memory implementation of ``PageableQuery``.

Paginates a plain sequence of records, which is handy for tests, for
results already loaded from an API, and for small reference tables.

Fields are either attribute/key names or callables:

    query = InMemoryQuery(users).filter(lambda u: u.active)
    planner.paginate_by(
        "by_name",
        sort("asc", lambda u: u.last_name or "~~~~~"),
        sort("desc", "id"),
    )

Comparisons follow SQL NULL semantics: any comparison involving ``None``
is false. A ``type_`` on a predicate leaf must be a callable used to cast
the cursor value (``uuid.UUID``, ``int`` ...).
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any

from keyset_pagination.core.pagination.enums import Direction, Operator
from keyset_pagination.core.pagination.predicates import And, Compare, Or, Predicate

if TYPE_CHECKING:
    from keyset_pagination.core.database.query import Row

_OPERATORS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQ: operator.eq,
    Operator.GT: operator.gt,
    Operator.GTE: operator.ge,
    Operator.LT: operator.lt,
    Operator.LTE: operator.le,
}


def resolve_field(field_ref: Any, record: Any) -> Any:
    """Read ``field_ref`` from ``record``."""
    if callable(field_ref):
        return field_ref(record)
    if isinstance(record, Mapping):
        return record[field_ref]
    return getattr(record, field_ref)


def evaluate(predicate: Predicate, record: Any) -> bool:
    """Evaluate a predicate tree against one record."""
    match predicate:
        case Compare(field=field_ref, op=op, value=value, type_=type_):
            left = resolve_field(field_ref, record)
            right = type_(value) if type_ is not None and value is not None else value
            if left is None or right is None:
                return False
            return _OPERATORS[op](left, right)
        case And(children=children):
            return all(evaluate(c, record) for c in children)
        case Or(children=children):
            return any(evaluate(c, record) for c in children)
    raise TypeError(f"Not a predicate node: {predicate!r}")


def _compare_keys(
    ordering: Sequence[tuple[Any, Direction]],
) -> Callable[[Any, Any], int]:
    def compare(a: Any, b: Any) -> int:
        for field_ref, direction in ordering:
            left, right = resolve_field(field_ref, a), resolve_field(field_ref, b)
            if left == right:
                continue
            result = -1 if left < right else 1
            return result if direction is Direction.ASC else -result
        return 0

    return compare


@dataclass(frozen=True, slots=True)
class InMemoryQuery:
    """Immutable query over a sequence of records."""

    records: tuple[Any, ...]
    filters: tuple[Callable[[Any], bool], ...] = ()
    predicates: tuple[Predicate, ...] = ()
    ordering: tuple[tuple[Any, Direction], ...] = ()
    cursor_fields: tuple[Any, ...] | None = None
    row_limit: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))

    def filter(self, condition: Callable[[Any], bool]) -> InMemoryQuery:
        """Caller-side filter, kept when counting."""
        return replace(self, filters=(*self.filters, condition))

    def ordered_by(self, *ordering: tuple[Any, Direction | str]) -> InMemoryQuery:
        """Apply a caller ordering (pagination rejects ordered queries)."""
        return self.order_by([(f, Direction(d)) for f, d in ordering])

    @property
    def is_ordered(self) -> bool:
        return bool(self.ordering)

    def order_by(self, ordering: Sequence[tuple[Any, Direction]]) -> InMemoryQuery:
        return replace(self, ordering=(*self.ordering, *ordering))

    def where(self, predicate: Predicate) -> InMemoryQuery:
        return replace(self, predicates=(*self.predicates, predicate))

    def select_cursor_fields(self, fields: Sequence[Any]) -> InMemoryQuery:
        return replace(self, cursor_fields=tuple(fields))

    def limit(self, limit: int) -> InMemoryQuery:
        return replace(self, row_limit=limit)

    def _matching(self) -> list[Any]:
        return [
            record
            for record in self.records
            if all(f(record) for f in self.filters)
            and all(evaluate(p, record) for p in self.predicates)
        ]

    def execute(self) -> list[Row]:
        records = self._matching()
        if self.ordering:
            records.sort(key=cmp_to_key(_compare_keys(self.ordering)))
        if self.row_limit is not None:
            records = records[: self.row_limit]
        fields = self.cursor_fields or ()
        return [
            (tuple(resolve_field(f, record) for f in fields), record) for record in records
        ]

    def count(self) -> int:
        return len(self._matching())


__all__ = ["InMemoryQuery", "evaluate", "resolve_field"]
