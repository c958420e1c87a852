"""Page and result containers returned by the paginator."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

from keyset_pagination.core.pagination.converters import DEFAULT_CONVERTERS, ConverterRegistry
from keyset_pagination.core.pagination.cursor import encode_cursor
from keyset_pagination.core.pagination.schemas import Connection, CursorPage, Edge, PageInfo

if TYPE_CHECKING:
    from keyset_pagination.core.database.query import PageableQuery
    from keyset_pagination.core.exceptions import PaginationError
    from keyset_pagination.core.pagination.cursor import CursorCodec
    from keyset_pagination.core.pagination.options import PageOptions


@dataclass(frozen=True, slots=True)
class Page[T]:
    """One page of records in canonical order.

    Rows are always in the strategy's declared order (or its inverse when
    ``inverted`` was requested), whichever direction was paged.

    Attributes:
        rows: ``(cursor_values, record)`` pairs
        has_previous_page: Rows exist before the first row
        has_next_page: Rows exist after the last row
        start_cursor: Cursor of the first row, None when the page is empty
        end_cursor: Cursor of the last row, None when the page is empty
        options: The validated request this page answers
        codec: Codec the cursors were encoded with
        converters: Converter registry the cursors were encoded with
        query: The caller's un-paginated query, used by ``total_count``

    Example:
        page = paginator.paginate_or_raise(query, "by_name", first=20)
        for user in page.records():
            ...
        if page.has_next_page:
            nxt = paginator.paginate_or_raise(
                query, "by_name", first=20, after=page.end_cursor
            )
    """

    rows: tuple[tuple[tuple[Any, ...], T], ...]
    has_previous_page: bool
    has_next_page: bool
    start_cursor: str | None
    end_cursor: str | None
    options: PageOptions
    codec: CursorCodec
    converters: ConverterRegistry = DEFAULT_CONVERTERS
    query: PageableQuery | None = None

    def __len__(self) -> int:
        return len(self.rows)

    def records(self) -> list[T]:
        return [record for _, record in self.rows]

    def cursors_and_records(self) -> list[tuple[str, T]]:
        """Every record paired with a cursor pointing at it.

        Cursors are encoded on demand; passing any of them as ``after`` or
        ``before`` resumes paging from that record.
        """
        return [
            (encode_cursor(values, self.codec, self.converters), record)
            for values, record in self.rows
        ]

    def page_info(self, total_count: int | None = None) -> PageInfo:
        return PageInfo(
            has_previous_page=self.has_previous_page,
            has_next_page=self.has_next_page,
            start_cursor=self.start_cursor,
            end_cursor=self.end_cursor,
            total_count=total_count,
        )

    def to_connection(self, total_count: int | None = None) -> Connection[T]:
        edges = [Edge(node=record, cursor=cursor) for cursor, record in self.cursors_and_records()]
        return Connection(edges=edges, page_info=self.page_info(total_count))

    def to_cursor_page(self, total_count: int | None = None) -> CursorPage[T]:
        return CursorPage(
            items=self.records(),
            next_cursor=self.end_cursor if self.has_next_page else None,
            prev_cursor=self.start_cursor if self.has_previous_page else None,
            has_more=self.has_next_page,
            has_previous=self.has_previous_page,
            total_count=total_count,
        )

    def total_count(self) -> int:
        """Count the rows of the un-paginated query.

        This is a separate, potentially expensive query. Use
        ``atotal_count`` when the query runs on an ``AsyncSession``.

        Raises:
            RuntimeError: The page was built without a query, or the query
                only counts asynchronously
        """
        result = self._require_query().count()
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise RuntimeError("Query counts asynchronously; use 'await page.atotal_count()'")
        return result

    async def atotal_count(self) -> int:
        """Async variant of ``total_count``; also accepts synchronous queries."""
        result = self._require_query().count()
        if inspect.isawaitable(result):
            return await result
        return result

    def _require_query(self) -> PageableQuery:
        if self.query is None:
            raise RuntimeError("Page has no query to count")
        return self.query


@dataclass(frozen=True, slots=True)
class PaginationResult[T]:
    """Either a ``Page`` or the ``PaginationError`` that prevented it.

    Example:
        result = paginator.paginate(query, "by_name", **args)
        if not result.ok:
            return {"error": result.error.message}, 400
        return result.page.to_cursor_page()
    """

    page: Page[T] | None = None
    error: PaginationError | None = None

    def __post_init__(self) -> None:
        if (self.page is None) == (self.error is None):
            raise ValueError("PaginationResult needs exactly one of page or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Page[T]:
        """Return the page, or raise the stored error."""
        if self.error is not None:
            raise self.error
        # __post_init__ guarantees a page whenever there is no error
        return cast("Page[T]", self.page)


__all__ = ["Page", "PaginationResult"]
