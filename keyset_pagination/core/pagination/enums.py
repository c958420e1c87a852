"""Direction and operator enums used by the predicate compiler."""

from __future__ import annotations

from enum import StrEnum


class Direction(StrEnum):
    """Sort direction of a single column."""

    ASC = "asc"
    DESC = "desc"

    def invert(self) -> Direction:
        return Direction.DESC if self is Direction.ASC else Direction.ASC

    @property
    def strict_operator(self) -> Operator:
        """Operator selecting rows strictly after a value in this direction."""
        return Operator.GT if self is Direction.ASC else Operator.LT

    @property
    def index_friendly_operator(self) -> Operator:
        """Non-strict bound on the leading column, usable by a composite index."""
        return Operator.GTE if self is Direction.ASC else Operator.LTE


class PagingDirection(StrEnum):
    """Which end of the result set a page is fetched from."""

    FORWARD = "forward"
    BACKWARD = "backward"


class Disposition(StrEnum):
    """Whether the strategy's declared directions are used as-is or flipped."""

    REGULAR = "regular"
    INVERTED = "inverted"


class Operator(StrEnum):
    """Comparison operators appearing in seek predicates."""

    EQ = "eq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"

    def invert(self) -> Operator:
        return _INVERTED_OPERATORS[self]


_INVERTED_OPERATORS = {
    Operator.EQ: Operator.EQ,
    Operator.GT: Operator.LT,
    Operator.GTE: Operator.LTE,
    Operator.LT: Operator.GT,
    Operator.LTE: Operator.GTE,
}


def effective_direction(
    declared: Direction,
    disposition: Disposition,
    paging_direction: PagingDirection,
) -> Direction:
    """Direction a column is actually traversed in for one fetch.

    Inverting the disposition and paging backward each flip the declared
    direction; doing both restores it.
    """
    direction = declared
    if disposition is Disposition.INVERTED:
        direction = direction.invert()
    if paging_direction is PagingDirection.BACKWARD:
        direction = direction.invert()
    return direction


__all__ = [
    "Direction",
    "Disposition",
    "Operator",
    "PagingDirection",
    "effective_direction",
]
