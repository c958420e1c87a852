"""Pagination strategies and the seek-predicate compiler.

A strategy is a named, ordered list of sort columns. From it we derive,
for every combination of disposition (regular/inverted) and paging
direction (forward/backward):

* the ORDER BY list, ``[(field_i, e_i)]``;
* the seek ("beyond cursor") predicate.

For effective directions ``e_1..e_k`` and cursor values ``cv_1..cv_k`` the
seek predicate is the lexicographic "after the cursor tuple" test, built
from the last column towards the first::

    P_k = field_k <strict(e_k)> cv_k
    P_i = field_i <strict(e_i)> cv_i  OR  (field_i = cv_i AND P_{i+1})

    seek = field_1 <gte|lte> cv_1 AND P_1      (k > 1)
    seek = P_1                                  (k = 1)

``strict`` is ``>`` for ASC and ``<`` for DESC. The leading non-strict
bound is redundant logically but lets a composite index satisfy the first
column's range directly.

Example:
    strategy = PaginationStrategy(
        "by_last_name",
        [sort("asc", func.coalesce(User.last_name, "~~~")), sort("desc", User.id)],
    )
    strategy.order_by(Disposition.REGULAR, PagingDirection.FORWARD)
    # ((coalesce(...), Direction.ASC), (User.id, Direction.DESC))

Ordering must be deterministic: the final column has to be unique and
non-NULL across the record set. Nullable columns must be coalesced in the
field expression itself; comparisons against NULL silently drop rows.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from itertools import product
from typing import Any

from keyset_pagination.core.exceptions import StrategyDefinitionError
from keyset_pagination.core.pagination.enums import (
    Direction,
    Disposition,
    Operator,
    PagingDirection,
    effective_direction,
)
from keyset_pagination.core.pagination.predicates import And, Compare, Or, Predicate


@dataclass(frozen=True, slots=True)
class SortColumn:
    """One column of a strategy.

    Attributes:
        direction: Declared sort direction
        field: Backend field reference (SQLAlchemy column/expression,
            attribute name or callable for in-memory queries)
        type_: Optional type the cursor value is cast to when comparing
        value_type: Python type decoded cursor values must have; None
            accepts anything
    """

    direction: Direction
    field: Any
    type_: Any = None
    value_type: type | None = None

    def accepts(self, value: Any) -> bool:
        """Whether a decoded cursor value fits this column."""
        expected = self.value_type
        if expected is None or value is None:
            return True
        # bool is an int subclass but never a valid int sort key
        if isinstance(value, bool) and expected is not bool:
            return False
        if expected is float:
            return isinstance(value, int | float)
        return isinstance(value, expected)


def _python_type(sql_type: Any) -> type | None:
    try:
        python_type = sql_type.python_type
    except (AttributeError, NotImplementedError):
        return None
    if not isinstance(python_type, type):
        return None
    # Enum members travel in cursors as their plain str or int values
    if issubclass(python_type, Enum):
        return next((base for base in (str, int) if issubclass(python_type, base)), None)
    return python_type


def sort(
    direction: Direction | str,
    field: Any,
    *,
    type_: Any = None,
    value_type: type | None = None,
) -> SortColumn:
    """Declare a sort column.

    The Python type of cursor values is taken from ``value_type`` when given,
    else from the SQLAlchemy type of ``type_`` or of ``field``. Cursors whose
    values do not match are rejected before the query is built.

    Example:
        sort("desc", User.inserted_at)
        sort("asc", User.public_id, type_=Uuid())
        sort("asc", "last_name", value_type=str)
    """
    try:
        parsed = Direction(direction.lower() if isinstance(direction, str) else direction)
    except ValueError:
        raise StrategyDefinitionError(
            f"Sort direction must be 'asc' or 'desc', got {direction!r}"
        ) from None
    if value_type is None:
        value_type = _python_type(type_ if type_ is not None else getattr(field, "type", None))
    return SortColumn(parsed, field, type_, value_type)


_COMBINATIONS = tuple(product(Disposition, PagingDirection))


class PaginationStrategy:
    """A compiled, immutable sort strategy.

    Effective directions and ORDER BY lists are computed once for all four
    (disposition, paging direction) pairs; only the seek predicate, which
    embeds cursor values, is built per call.
    """

    __slots__ = ("name", "columns", "_directions", "_order_bys")

    def __init__(self, name: str, columns: Sequence[SortColumn]) -> None:
        if not isinstance(name, str) or not name:
            raise StrategyDefinitionError("Strategy name must be a non-empty string")
        if not columns:
            raise StrategyDefinitionError(f"Strategy {name!r} declares no sort columns")
        for column in columns:
            if not isinstance(column, SortColumn):
                raise StrategyDefinitionError(
                    f"Strategy {name!r} columns must be declared with sort(), got {column!r}"
                )

        self.name = name
        self.columns: tuple[SortColumn, ...] = tuple(columns)
        self._directions: dict[tuple[Disposition, PagingDirection], tuple[Direction, ...]] = {
            (disposition, paging): tuple(
                effective_direction(c.direction, disposition, paging) for c in self.columns
            )
            for disposition, paging in _COMBINATIONS
        }
        self._order_bys = {
            key: tuple(
                (column.field, direction)
                for column, direction in zip(self.columns, directions, strict=True)
            )
            for key, directions in self._directions.items()
        }

    def __repr__(self) -> str:
        dirs = ", ".join(c.direction.value for c in self.columns)
        return f"PaginationStrategy({self.name!r}, [{dirs}])"

    @property
    def arity(self) -> int:
        """Number of sort columns, which is also the cursor length."""
        return len(self.columns)

    @property
    def fields(self) -> tuple[Any, ...]:
        """Projection: the field references whose values form a cursor."""
        return tuple(c.field for c in self.columns)

    def directions(
        self, disposition: Disposition, paging_direction: PagingDirection
    ) -> tuple[Direction, ...]:
        return self._directions[(disposition, paging_direction)]

    def order_by(
        self, disposition: Disposition, paging_direction: PagingDirection
    ) -> tuple[tuple[Any, Direction], ...]:
        return self._order_bys[(disposition, paging_direction)]

    def beyond_cursor(
        self,
        cursor_values: Sequence[Any],
        disposition: Disposition,
        paging_direction: PagingDirection,
    ) -> Predicate:
        """Predicate matching rows strictly beyond ``cursor_values``.

        Raises:
            ValueError: ``cursor_values`` does not have one value per column,
                or a value does not match its column's ``value_type``
        """
        if len(cursor_values) != self.arity:
            raise ValueError(
                f"Strategy {self.name!r} expects {self.arity} cursor values, "
                f"got {len(cursor_values)}"
            )
        for position, (column, value) in enumerate(zip(self.columns, cursor_values, strict=True)):
            if not column.accepts(value):
                raise ValueError(
                    f"Strategy {self.name!r} column {position} expects "
                    f"{column.value_type.__name__}, got {type(value).__name__}"
                )

        directions = self.directions(disposition, paging_direction)
        legs = list(zip(self.columns, directions, cursor_values, strict=True))

        column, direction, value = legs[-1]
        predicate: Predicate = Compare(
            column.field, direction.strict_operator, value, column.type_
        )
        for column, direction, value in reversed(legs[:-1]):
            predicate = Or(
                (
                    Compare(column.field, direction.strict_operator, value, column.type_),
                    And((Compare(column.field, Operator.EQ, value, column.type_), predicate)),
                )
            )

        if self.arity > 1:
            column, direction, value = legs[0]
            leading = Compare(
                column.field, direction.index_friendly_operator, value, column.type_
            )
            predicate = And((leading, predicate))
        return predicate


__all__ = ["PaginationStrategy", "SortColumn", "sort"]
