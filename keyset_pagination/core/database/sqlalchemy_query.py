"""SQLAlchemy implementation of ``PageableQuery``.

Wraps a ``Select`` together with the session that will run it. Works with
both ``Session`` (``execute`` returns rows) and ``AsyncSession``
(``execute`` returns an awaitable; use ``Paginator.apaginate``).

Usage:
    from sqlalchemy import select

    stmt = select(User).where(User.is_active.is_(True))
    page = paginator.paginate_or_raise(
        SelectQuery(stmt, session), "by_last_name", first=20
    )

    # Async
    page = await paginator.apaginate_or_raise(
        SelectQuery(stmt, async_session), "by_last_name", first=20, after=cursor
    )
"""

from __future__ import annotations

import inspect
import operator
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, and_, asc, desc, func, literal, or_, select

from keyset_pagination.core.pagination.enums import Direction, Operator
from keyset_pagination.core.pagination.predicates import And, Compare, Or, Predicate

if TYPE_CHECKING:
    from sqlalchemy.engine import Result
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import Session
    from sqlalchemy.sql.elements import ColumnElement

    from keyset_pagination.core.database.query import Row

_OPERATORS: dict[Operator, Callable[[Any, Any], Any]] = {
    Operator.EQ: operator.eq,
    Operator.GT: operator.gt,
    Operator.GTE: operator.ge,
    Operator.LT: operator.lt,
    Operator.LTE: operator.le,
}


def to_clause(predicate: Predicate) -> ColumnElement[bool]:
    """Translate a predicate tree into a SQLAlchemy boolean clause.

    A ``type_`` on a leaf binds the cursor value with that SQL type, e.g.
    ``Compare(User.public_id, GT, "9b2e...", Uuid())``.
    """
    match predicate:
        case Compare(field=field, op=op, value=value, type_=type_):
            bound = literal(value, type_) if type_ is not None else value
            return _OPERATORS[op](field, bound)
        case And(children=children):
            return and_(*(to_clause(c) for c in children))
        case Or(children=children):
            return or_(*(to_clause(c) for c in children))
    raise TypeError(f"Not a predicate node: {predicate!r}")


class SelectQuery:
    """A ``Select`` statement bound to a session.

    Attributes:
        statement: Current SQLAlchemy statement
        session: Session used by ``execute``/``count``
    """

    __slots__ = ("statement", "session", "_cursor_field_count")

    def __init__(
        self,
        statement: Select[Any],
        session: Session | AsyncSession | None = None,
        *,
        cursor_field_count: int = 0,
    ) -> None:
        self.statement = statement
        self.session = session
        self._cursor_field_count = cursor_field_count

    def _replace(self, statement: Select[Any], cursor_field_count: int | None = None) -> SelectQuery:
        return SelectQuery(
            statement,
            self.session,
            cursor_field_count=(
                self._cursor_field_count if cursor_field_count is None else cursor_field_count
            ),
        )

    @property
    def is_ordered(self) -> bool:
        return bool(self.statement._order_by_clauses)

    def order_by(self, ordering: Sequence[tuple[Any, Direction]]) -> SelectQuery:
        clauses = [
            asc(field) if direction is Direction.ASC else desc(field)
            for field, direction in ordering
        ]
        return self._replace(self.statement.order_by(*clauses))

    def where(self, predicate: Predicate) -> SelectQuery:
        return self._replace(self.statement.where(to_clause(predicate)))

    def select_cursor_fields(self, fields: Sequence[Any]) -> SelectQuery:
        return self._replace(self.statement.add_columns(*fields), len(fields))

    def limit(self, limit: int) -> SelectQuery:
        return self._replace(self.statement.limit(limit))

    def execute(self) -> list[Row] | Awaitable[list[Row]]:
        result = self._require_session().execute(self.statement)
        if inspect.isawaitable(result):
            return self._rows_async(result)
        return self._rows(result)

    def count(self) -> int | Awaitable[int]:
        count_stmt = select(func.count()).select_from(
            self.statement.order_by(None).limit(None).subquery()
        )
        result = self._require_session().execute(count_stmt)
        if inspect.isawaitable(result):
            return self._scalar_async(result)
        return result.scalar_one()

    def _require_session(self) -> Session | AsyncSession:
        if self.session is None:
            raise RuntimeError("SelectQuery has no session bound")
        return self.session

    async def _rows_async(self, pending: Awaitable[Result[Any]]) -> list[Row]:
        return self._rows(await pending)

    async def _scalar_async(self, pending: Awaitable[Result[Any]]) -> int:
        return (await pending).scalar_one()

    def _rows(self, result: Result[Any]) -> list[Row]:
        k = self._cursor_field_count
        rows = []
        for row in result.all():
            values = tuple(row)
            if k == 0:
                rows.append(((), values[0] if len(values) == 1 else values))
                continue
            base = values[:-k]
            record = base[0] if len(base) == 1 else base
            rows.append((values[-k:], record))
        return rows


__all__ = ["SelectQuery", "to_clause"]
