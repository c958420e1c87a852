"""Response schemas for keyset pages.

Two shapes are offered for the same ``Page``:

1. Relay connection (``Connection``/``Edge``/``PageInfo``): every record is
   wrapped in an edge carrying its own cursor.
2. REST style (``CursorPage``): a flat item list with next/previous cursors.

Both are built from a ``Page`` via ``Page.to_connection()`` and
``Page.to_cursor_page()``; records are passed through untouched, so use a
pydantic model or a plain mapping as the record type when serializing.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PageInfo(BaseModel):
    """Navigation metadata for one page.

    Attributes:
        has_previous_page: Rows exist before ``start_cursor``
        has_next_page: Rows exist after ``end_cursor``
        start_cursor: Cursor of the first row (None on an empty page)
        end_cursor: Cursor of the last row (None on an empty page)
        total_count: Size of the un-paginated result, when it was counted
    """

    model_config = ConfigDict(frozen=True)

    has_previous_page: bool = Field(description="Whether rows exist before this page")
    has_next_page: bool = Field(description="Whether rows exist after this page")
    start_cursor: str | None = Field(default=None, description="Cursor of the first row")
    end_cursor: str | None = Field(default=None, description="Cursor of the last row")
    total_count: int | None = Field(default=None, description="Total row count (optional)")


class Edge(BaseModel, Generic[T]):
    """A record together with the cursor that points at it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    node: T = Field(description="The record")
    cursor: str = Field(description="Cursor of this record")


class Connection(BaseModel, Generic[T]):
    """Relay-style connection.

    Client navigation:
        GET /users?first=10                         first page
        GET /users?first=10&after=<end_cursor>      next page
        GET /users?last=10&before=<start_cursor>    previous page
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    edges: list[Edge[T]] = Field(default_factory=list, description="Records with cursors")
    page_info: PageInfo = Field(description="Navigation metadata")

    @property
    def nodes(self) -> list[T]:
        return [edge.node for edge in self.edges]

    def to_cursor_page(self) -> CursorPage[T]:
        """Flatten into a ``CursorPage``.

        ``next_cursor``/``prev_cursor`` are only set when there is somewhere
        to go in that direction.
        """
        info = self.page_info
        return CursorPage(
            items=self.nodes,
            next_cursor=info.end_cursor if info.has_next_page else None,
            prev_cursor=info.start_cursor if info.has_previous_page else None,
            has_more=info.has_next_page,
            has_previous=info.has_previous_page,
            total_count=info.total_count,
        )


class CursorPage(BaseModel, Generic[T]):
    """REST-style keyset page.

    Usage:
        @router.get("/users", response_model=CursorPage[UserResponse])
        async def list_users(session: SessionDep, args: KeysetArgs):
            page = await paginator.apaginate_or_raise(
                SelectQuery(select(User), session), "by_name", **args
            )
            return page.to_cursor_page()
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: list[T] = Field(default_factory=list, description="Records of this page")
    next_cursor: str | None = Field(default=None, description="Pass as `after` for the next page")
    prev_cursor: str | None = Field(
        default=None, description="Pass as `before` for the previous page"
    )
    has_more: bool = Field(default=False, description="Whether rows exist after this page")
    has_previous: bool = Field(default=False, description="Whether rows exist before this page")
    total_count: int | None = Field(default=None, description="Total row count (optional)")


__all__ = ["Connection", "CursorPage", "Edge", "PageInfo"]
