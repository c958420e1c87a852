"""Unit tests for Page views, PaginationResult and the response schemas."""
from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from keyset_pagination.core.database import InMemoryQuery
from keyset_pagination.core.exceptions import AlreadyOrderedError
from keyset_pagination.core.pagination import (
    BinaryCursorCodec,
    Connection,
    CursorPage,
    Edge,
    Page,
    PageInfo,
    PaginationResult,
    decode_cursor,
    validate_options,
)


class UserOut(BaseModel):
    id: int
    name: str


class AsyncCountQuery(InMemoryQuery):
    __slots__ = ()

    async def count(self):
        return InMemoryQuery.count(self)


@pytest.fixture
def users() -> list[UserOut]:
    return [UserOut(id=i, name=f"user-{i}") for i in range(1, 6)]


@pytest.fixture
def page(paginator, users) -> Page[UserOut]:
    query = InMemoryQuery(users).filter(lambda u: u.id != 5)
    first = paginator.paginate_or_raise(query, "by_id", first=2)
    return paginator.paginate_or_raise(query, "by_id", first=1, after=first.end_cursor)


# ──────────────────────────────────────────────────────────────
# Page views
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestPageViews:
    """Tests for the record/cursor views of a Page."""

    def test_records(self, page):
        assert [u.id for u in page.records()] == [3]
        assert len(page) == 1

    def test_cursors_and_records(self, paginator, users):
        page = paginator.paginate_or_raise(InMemoryQuery(users), "by_id", first=3)

        pairs = page.cursors_and_records()

        assert [u.id for _, u in pairs] == [1, 2, 3]
        assert [decode_cursor(c, BinaryCursorCodec()) for c, _ in pairs] == [[1], [2], [3]]
        assert pairs[0][0] == page.start_cursor
        assert pairs[-1][0] == page.end_cursor

    def test_page_is_immutable(self, page):
        with pytest.raises(AttributeError):
            page.has_next_page = False

    def test_to_connection(self, page):
        connection = page.to_connection()

        assert isinstance(connection, Connection)
        assert connection.nodes == page.records()
        assert connection.edges[0].cursor == page.start_cursor
        assert connection.page_info == PageInfo(
            has_previous_page=True,
            has_next_page=True,
            start_cursor=page.start_cursor,
            end_cursor=page.end_cursor,
        )

    def test_to_connection_serializes(self, page):
        """Connections of pydantic records dump to plain JSON-ready data."""
        data = page.to_connection(total_count=4).model_dump()

        assert data["edges"] == [{"node": {"id": 3, "name": "user-3"}, "cursor": page.end_cursor}]
        assert data["page_info"]["total_count"] == 4

    def test_to_cursor_page(self, page):
        cursor_page = page.to_cursor_page()

        assert isinstance(cursor_page, CursorPage)
        assert [u.id for u in cursor_page.items] == [3]
        assert cursor_page.next_cursor == page.end_cursor
        assert cursor_page.prev_cursor == page.start_cursor
        assert cursor_page.has_more is True
        assert cursor_page.has_previous is True

    def test_to_cursor_page_at_edges(self, paginator, users):
        """Cursors are omitted where there is nowhere to go."""
        page = paginator.paginate_or_raise(InMemoryQuery(users), "by_id", first=10)

        cursor_page = page.to_cursor_page()

        assert cursor_page.next_cursor is None
        assert cursor_page.prev_cursor is None
        assert cursor_page.has_more is False

    def test_connection_flattening_matches_page(self, page):
        assert page.to_connection().to_cursor_page() == page.to_cursor_page()


# ──────────────────────────────────────────────────────────────
# Total count
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestTotalCount:
    """Counting runs on the caller's un-paginated query."""

    def test_total_count(self, page):
        """The filter is honoured; page size and cursor are not."""
        assert page.total_count() == 4

    @pytest.mark.asyncio
    async def test_atotal_count_sync_query(self, page):
        assert await page.atotal_count() == 4

    @pytest.mark.asyncio
    async def test_atotal_count_async_query(self, paginator, users):
        page = paginator.paginate_or_raise(AsyncCountQuery(users), "by_id", first=1)

        assert await page.atotal_count() == 5

    def test_total_count_rejects_async_query(self, paginator, users):
        page = paginator.paginate_or_raise(AsyncCountQuery(users), "by_id", first=1)

        with pytest.raises(RuntimeError, match="atotal_count"):
            page.total_count()

    def test_total_count_without_query(self):
        page = Page(
            rows=(),
            has_previous_page=False,
            has_next_page=False,
            start_cursor=None,
            end_cursor=None,
            options=validate_options("by_id", max_page_size=10, first=1),
            codec=BinaryCursorCodec(),
        )

        with pytest.raises(RuntimeError, match="no query"):
            page.total_count()


# ──────────────────────────────────────────────────────────────
# PaginationResult
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestPaginationResult:
    """Tests for the non-raising result container."""

    def test_ok(self, page):
        result = PaginationResult(page=page)

        assert result.ok
        assert result.unwrap() is page

    def test_error(self):
        error = AlreadyOrderedError()
        result = PaginationResult(error=error)

        assert not result.ok
        with pytest.raises(AlreadyOrderedError):
            result.unwrap()

    def test_exactly_one(self, page):
        with pytest.raises(ValueError):
            PaginationResult()
        with pytest.raises(ValueError):
            PaginationResult(page=page, error=AlreadyOrderedError())


# ──────────────────────────────────────────────────────────────
# Schemas
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestSchemas:
    """Tests for the Relay and REST response models."""

    def test_page_info_defaults(self):
        info = PageInfo(has_previous_page=False, has_next_page=True)

        assert info.start_cursor is None
        assert info.end_cursor is None
        assert info.total_count is None

    def test_page_info_is_frozen(self):
        info = PageInfo(has_previous_page=False, has_next_page=False)

        with pytest.raises(ValidationError):
            info.has_next_page = True

    def test_parametrized_connection_validates_nodes(self):
        connection = Connection[UserOut](
            edges=[Edge[UserOut](node={"id": 1, "name": "a"}, cursor="c1")],
            page_info=PageInfo(has_previous_page=False, has_next_page=False),
        )

        assert connection.nodes == [UserOut(id=1, name="a")]

    def test_connection_to_cursor_page(self):
        connection = Connection[int](
            edges=[Edge[int](node=1, cursor="a"), Edge[int](node=2, cursor="b")],
            page_info=PageInfo(
                has_previous_page=False,
                has_next_page=True,
                start_cursor="a",
                end_cursor="b",
                total_count=10,
            ),
        )

        cursor_page = connection.to_cursor_page()

        assert cursor_page.items == [1, 2]
        assert cursor_page.next_cursor == "b"
        assert cursor_page.prev_cursor is None
        assert cursor_page.has_more is True
        assert cursor_page.total_count == 10

    def test_cursor_page_defaults(self):
        cursor_page = CursorPage[str]()

        assert cursor_page.items == []
        assert cursor_page.has_more is False
