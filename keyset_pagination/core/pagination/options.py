"""Validation of pagination arguments.

Callers describe the page they want with Relay-style arguments:

    first=10                  first ten rows
    first=10, after=cursor    ten rows after ``cursor``
    last=10                   last ten rows
    last=10, before=cursor    ten rows before ``cursor``

plus ``inverted=True`` to flip every column of the strategy. ``inverted``
must be a real boolean; strings such as ``"false"`` are rejected rather than
read as truthy. Arguments passed as ``None`` count as not supplied, which
lets HTTP layers forward optional query parameters unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from keyset_pagination.core.exceptions import (
    InvalidArgumentCombinationError,
    InvalidInvertedFlagError,
    PageSizeOutOfRangeError,
)
from keyset_pagination.core.pagination.enums import Disposition, PagingDirection

PAGING_ARGUMENTS = ("first", "last", "after", "before")

_VALID_KEY_SETS = frozenset(
    frozenset(combo) for combo in InvalidArgumentCombinationError.VALID_COMBINATIONS
)


@dataclass(frozen=True, slots=True)
class PageOptions:
    """A validated pagination request.

    Attributes:
        strategy: Name of the strategy to paginate by
        cursor: Opaque cursor from ``after``/``before`` (None for an edge page)
        paging_direction: FORWARD for ``first``, BACKWARD for ``last``
        disposition: INVERTED when ``inverted=True`` was requested
        page_size: Rows requested
        max_page_size: Upper bound the page size was checked against
    """

    strategy: str
    cursor: str | None
    paging_direction: PagingDirection
    disposition: Disposition
    page_size: int
    max_page_size: int

    @property
    def fetch_limit(self) -> int:
        """Rows to fetch: one beyond the page reveals whether more exist."""
        return self.page_size + 1


def validate_options(
    strategy: str,
    *,
    max_page_size: int,
    first: int | None = None,
    last: int | None = None,
    after: str | None = None,
    before: str | None = None,
    inverted: bool | None = False,
) -> PageOptions:
    """Build ``PageOptions`` from raw arguments.

    Raises:
        InvalidArgumentCombinationError: Keys are not one of the valid sets
        PageSizeOutOfRangeError: Page size is not an int in ``0..max_page_size``
        InvalidInvertedFlagError: ``inverted`` is neither a bool nor None
    """
    supplied = {
        "first": first,
        "last": last,
        "after": after,
        "before": before,
    }
    provided = [key for key in PAGING_ARGUMENTS if supplied[key] is not None]
    if frozenset(provided) not in _VALID_KEY_SETS:
        raise InvalidArgumentCombinationError(provided)

    if first is not None:
        page_size, cursor, paging_direction = first, after, PagingDirection.FORWARD
    else:
        page_size, cursor, paging_direction = last, before, PagingDirection.BACKWARD

    if (
        not isinstance(page_size, int)
        or isinstance(page_size, bool)
        or not 0 <= page_size <= max_page_size
    ):
        raise PageSizeOutOfRangeError(page_size, max_page_size)

    if inverted is not None and not isinstance(inverted, bool):
        raise InvalidInvertedFlagError(inverted)

    return PageOptions(
        strategy=strategy,
        cursor=cursor,
        paging_direction=paging_direction,
        disposition=Disposition.INVERTED if inverted else Disposition.REGULAR,
        page_size=page_size,
        max_page_size=max_page_size,
    )


def validate_option_mapping(
    strategy: str, args: Mapping[str, Any], *, max_page_size: int
) -> PageOptions:
    """``validate_options`` for a mapping of arguments (e.g. parsed query params).

    Keys other than first/last/after/before/inverted are rejected as an
    invalid combination so typos never pass silently.
    """
    unknown = sorted(set(args) - {*PAGING_ARGUMENTS, "inverted"})
    if unknown:
        present = [k for k in PAGING_ARGUMENTS if args.get(k) is not None]
        raise InvalidArgumentCombinationError([*present, *unknown])
    return validate_options(
        strategy,
        max_page_size=max_page_size,
        first=args.get("first"),
        last=args.get("last"),
        after=args.get("after"),
        before=args.get("before"),
        inverted=args.get("inverted"),
    )


__all__ = ["PAGING_ARGUMENTS", "PageOptions", "validate_option_mapping", "validate_options"]
