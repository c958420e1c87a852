"""Keyset pagination orchestrator.

``Paginator`` ties the pieces together: it validates the caller's
arguments, looks up the strategy, decodes the cursor, asks the query to
seek/order/project/limit itself, runs it and turns the fetched rows into a
``Page``.

Usage:
    planner = PaginationPlanner()
    planner.paginate_by("by_name", sort("asc", User.last_name), sort("desc", User.id))
    paginator = Paginator(planner.freeze())

    # Sync session
    page = paginator.paginate_or_raise(SelectQuery(select(User), session), "by_name", first=20)

    # Async session
    page = await paginator.apaginate_or_raise(
        SelectQuery(select(User), async_session), "by_name", first=20, after=cursor
    )

    # Non-raising variant
    result = paginator.paginate(query, "by_name", last=20, before=cursor)
    if result.ok:
        page = result.page

Caller mistakes (bad argument combinations, page sizes, ordered queries,
malformed cursors) are ``PaginationError`` subclasses: ``paginate`` returns
them inside a ``PaginationResult`` and ``paginate_or_raise`` raises them.
An unknown strategy name is a programmer error and is always raised.
Errors raised while executing the query propagate unchanged.

Rows are fetched with ``LIMIT page_size + 1``; the extra row only tells
whether more rows exist beyond the page and is never returned.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from keyset_pagination.core.exceptions import (
    AlreadyOrderedError,
    MalformedCursorError,
    PaginationError,
)
from keyset_pagination.core.pagination.converters import DEFAULT_CONVERTERS, ConverterRegistry
from keyset_pagination.core.pagination.cursor import (
    codec_from_settings,
    decode_cursor,
    encode_cursor,
)
from keyset_pagination.core.pagination.enums import PagingDirection
from keyset_pagination.core.pagination.options import validate_option_mapping
from keyset_pagination.core.pagination.page import Page, PaginationResult
from keyset_pagination.core.settings import get_pagination_settings
from keyset_pagination.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from keyset_pagination.core.database.query import PageableQuery, Row
    from keyset_pagination.core.pagination.cursor import CursorCodec
    from keyset_pagination.core.pagination.options import PageOptions
    from keyset_pagination.core.pagination.planner import PaginationPlanner
    from keyset_pagination.core.pagination.strategy import PaginationStrategy

# Standard logger for INFO/WARNING
_logger = logging.getLogger(__name__)
# Lazy logger for DEBUG
_lazy = get_lazy_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Plan:
    """A validated request with the query ready to execute."""

    options: PageOptions
    strategy: PaginationStrategy
    codec: CursorCodec
    source: PageableQuery
    query: PageableQuery


class Paginator:
    """Runs keyset pagination against a ``PageableQuery``.

    Args:
        planner: Registry the strategy names are resolved in
        codec: Cursor codec; defaults to the one selected in settings
        converters: Registry used to make cursor values portable
        max_page_size: Largest page a caller may request; defaults to settings
        max_cursor_length: Longest cursor accepted; defaults to settings
    """

    __slots__ = ("planner", "codec", "converters", "max_page_size", "max_cursor_length")

    def __init__(
        self,
        planner: PaginationPlanner,
        *,
        codec: CursorCodec | None = None,
        converters: ConverterRegistry | None = None,
        max_page_size: int | None = None,
        max_cursor_length: int | None = None,
    ) -> None:
        settings = get_pagination_settings()
        self.planner = planner
        self.codec = codec if codec is not None else codec_from_settings(settings)
        self.converters = converters if converters is not None else DEFAULT_CONVERTERS
        self.max_page_size = max_page_size if max_page_size is not None else settings.max_page_size
        self.max_cursor_length = (
            max_cursor_length if max_cursor_length is not None else settings.max_cursor_length
        )

    # ──────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────

    def paginate(
        self,
        query: PageableQuery,
        strategy: str,
        /,
        *,
        codec: CursorCodec | None = None,
        max_page_size: int | None = None,
        **args: Any,
    ) -> PaginationResult[Any]:
        """Fetch one page, returning caller errors instead of raising them.

        Args:
            query: Un-ordered query to paginate
            strategy: Name of a registered strategy
            codec: Per-call codec override
            max_page_size: Per-call page size ceiling override
            **args: ``first``/``after``, ``last``/``before`` and ``inverted``

        Raises:
            UnknownStrategyError: ``strategy`` is not registered
        """
        try:
            return PaginationResult(
                page=self.paginate_or_raise(
                    query, strategy, codec=codec, max_page_size=max_page_size, **args
                )
            )
        except PaginationError as exc:
            return PaginationResult(error=exc)

    def paginate_or_raise(
        self,
        query: PageableQuery,
        strategy: str,
        /,
        *,
        codec: CursorCodec | None = None,
        max_page_size: int | None = None,
        **args: Any,
    ) -> Page[Any]:
        """Fetch one page.

        Raises:
            PaginationError: Invalid arguments, ordered query or bad cursor
            UnknownStrategyError: ``strategy`` is not registered
            TypeError: The query executes asynchronously; use ``apaginate``
        """
        plan = self._prepare(query, strategy, args, codec, max_page_size)
        rows = plan.query.execute()
        if inspect.isawaitable(rows):
            _discard(rows)
            raise TypeError(
                "Query executes asynchronously; use 'await paginator.apaginate(...)'"
            )
        return self._assemble(plan, rows)

    async def apaginate(
        self,
        query: PageableQuery,
        strategy: str,
        /,
        *,
        codec: CursorCodec | None = None,
        max_page_size: int | None = None,
        **args: Any,
    ) -> PaginationResult[Any]:
        """Async variant of ``paginate``."""
        try:
            page = await self.apaginate_or_raise(
                query, strategy, codec=codec, max_page_size=max_page_size, **args
            )
        except PaginationError as exc:
            return PaginationResult(error=exc)
        return PaginationResult(page=page)

    async def apaginate_or_raise(
        self,
        query: PageableQuery,
        strategy: str,
        /,
        *,
        codec: CursorCodec | None = None,
        max_page_size: int | None = None,
        **args: Any,
    ) -> Page[Any]:
        """Async variant of ``paginate_or_raise``.

        Works with queries whose ``execute`` returns rows directly as well
        as with those returning an awaitable (``AsyncSession``).
        """
        plan = self._prepare(query, strategy, args, codec, max_page_size)
        rows = plan.query.execute()
        if inspect.isawaitable(rows):
            rows = await rows
        return self._assemble(plan, rows)

    # ──────────────────────────────────────────────────────────────
    # Steps
    # ──────────────────────────────────────────────────────────────

    def _prepare(
        self,
        query: PageableQuery,
        strategy_name: str,
        args: dict[str, Any],
        codec: CursorCodec | None,
        max_page_size: int | None,
    ) -> _Plan:
        codec = codec if codec is not None else self.codec
        try:
            options = validate_option_mapping(
                strategy_name,
                args,
                max_page_size=max_page_size if max_page_size is not None else self.max_page_size,
            )
            if query.is_ordered:
                raise AlreadyOrderedError()
        except PaginationError as exc:
            _logger.info(
                "Pagination request rejected",
                extra={
                    "strategy": strategy_name,
                    "error": type(exc).__name__,
                    "operation": "pagination.validate",
                },
            )
            raise

        strategy = self.planner.get(strategy_name)
        disposition, paging_direction = options.disposition, options.paging_direction

        prepared = query
        if options.cursor is not None:
            prepared = prepared.where(self._seek(strategy, options, codec))
        prepared = (
            prepared.order_by(strategy.order_by(disposition, paging_direction))
            .select_cursor_fields(strategy.fields)
            .limit(options.fetch_limit)
        )
        return _Plan(options, strategy, codec, query, prepared)

    def _seek(self, strategy: PaginationStrategy, options: PageOptions, codec: CursorCodec) -> Any:
        try:
            values = decode_cursor(
                options.cursor, codec, self.converters, max_length=self.max_cursor_length
            )
            return strategy.beyond_cursor(values, options.disposition, options.paging_direction)
        except ValueError as exc:
            # Never log the cursor itself: it is untrusted input
            _logger.warning(
                "Malformed pagination cursor",
                extra={
                    "strategy": strategy.name,
                    "reason": type(exc).__name__,
                    "cursor_length": len(options.cursor) if isinstance(options.cursor, str) else None,
                    "operation": "pagination.decode_cursor",
                },
            )
            raise MalformedCursorError(strategy.name) from exc

    def _assemble(self, plan: _Plan, fetched: Sequence[Row]) -> Page[Any]:
        options = plan.options
        rows = tuple((tuple(values), record) for values, record in fetched)
        has_more = len(rows) > options.page_size
        rows = rows[: options.page_size]

        has_cursor = options.cursor is not None
        if options.paging_direction is PagingDirection.FORWARD:
            has_previous, has_next = has_cursor, has_more
        else:
            rows = rows[::-1]
            has_previous, has_next = has_more, has_cursor

        page = Page(
            rows=rows,
            has_previous_page=has_previous,
            has_next_page=has_next,
            start_cursor=encode_cursor(rows[0][0], plan.codec, self.converters) if rows else None,
            end_cursor=encode_cursor(rows[-1][0], plan.codec, self.converters) if rows else None,
            options=options,
            codec=plan.codec,
            converters=self.converters,
            query=plan.source,
        )
        _lazy.debug(
            lambda: f"pagination.paginate: {plan.strategy.name}"
            f"({options.paging_direction.value}, size={options.page_size}, "
            f"{options.disposition.value}) -> {len(rows)} rows, "
            f"has_previous={has_previous}, has_next={has_next}"
        )
        return page


def _discard(pending: Awaitable[Any]) -> None:
    if inspect.iscoroutine(pending):
        pending.close()


def paginate(
    planner: PaginationPlanner, query: PageableQuery, strategy: str, /, **args: Any
) -> PaginationResult[Any]:
    """``Paginator(planner).paginate(...)`` with settings defaults."""
    return Paginator(planner).paginate(query, strategy, **args)


def paginate_or_raise(
    planner: PaginationPlanner, query: PageableQuery, strategy: str, /, **args: Any
) -> Page[Any]:
    """``Paginator(planner).paginate_or_raise(...)`` with settings defaults."""
    return Paginator(planner).paginate_or_raise(query, strategy, **args)


__all__ = ["Paginator", "paginate", "paginate_or_raise"]
