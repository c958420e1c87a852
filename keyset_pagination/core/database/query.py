"""The query interface the paginator drives.

Any backend can be paginated once it is wrapped in an object satisfying
``PageableQuery``. Every builder method returns a *new* query; the
original stays untouched so it can be reused, e.g. for counting.

Rows returned by ``execute`` after ``select_cursor_fields`` are pairs of
``(cursor_values, record)`` where ``cursor_values`` is a tuple with one value
per selected field.
"""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from keyset_pagination.core.pagination.enums import Direction
    from keyset_pagination.core.pagination.predicates import Predicate

Row = tuple[tuple[Any, ...], Any]


@runtime_checkable
class PageableQuery(Protocol):
    """Minimal query-builder surface required for keyset pagination."""

    @property
    def is_ordered(self) -> bool:
        """Whether the query already carries an ordering."""
        ...

    def order_by(self, ordering: Sequence[tuple[Any, Direction]]) -> PageableQuery: ...

    def where(self, predicate: Predicate) -> PageableQuery: ...

    def select_cursor_fields(self, fields: Sequence[Any]) -> PageableQuery: ...

    def limit(self, limit: int) -> PageableQuery: ...

    def execute(self) -> Sequence[Row] | Awaitable[Sequence[Row]]:
        """Run the query; may return rows directly or an awaitable of rows."""
        ...

    def count(self) -> int | Awaitable[int]:
        """Count rows of the un-paginated query."""
        ...


__all__ = ["PageableQuery", "Row"]
