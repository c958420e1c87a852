"""Keyset (seek) pagination.

Keyset pagination pages through an ordered result by remembering the sort
key of the last row seen and asking for rows strictly beyond it, instead of
skipping ``OFFSET`` rows. Pages stay stable while data changes and every
page is an index seek.

Declare strategies once:
    planner = PaginationPlanner()
    planner.paginate_by(
        "by_last_name",
        sort("asc", func.coalesce(User.last_name, "~~~~~")),
        sort("desc", User.id),
    )
    paginator = Paginator(planner.freeze())

Then page through any ``PageableQuery``:
    page = await paginator.apaginate_or_raise(
        SelectQuery(select(User), session), "by_last_name", first=20, after=cursor
    )
    return page.to_cursor_page()

Cursors are opaque base64url strings that clients pass back unchanged.
"""

from keyset_pagination.core.pagination.converters import (
    DEFAULT_CONVERTERS,
    ConverterRegistry,
    TaggedValue,
    ValueConverter,
)
from keyset_pagination.core.pagination.cursor import (
    BinaryCursorCodec,
    CursorCodec,
    JSONCursorCodec,
    SignedCursorCodec,
    codec_from_settings,
    decode_cursor,
    encode_cursor,
    get_codec,
)
from keyset_pagination.core.pagination.enums import (
    Direction,
    Disposition,
    Operator,
    PagingDirection,
)
from keyset_pagination.core.pagination.options import (
    PageOptions,
    validate_option_mapping,
    validate_options,
)
from keyset_pagination.core.pagination.page import Page, PaginationResult
from keyset_pagination.core.pagination.paginator import Paginator, paginate, paginate_or_raise
from keyset_pagination.core.pagination.planner import PaginationPlanner
from keyset_pagination.core.pagination.predicates import And, Compare, Or, Predicate
from keyset_pagination.core.pagination.schemas import Connection, CursorPage, Edge, PageInfo
from keyset_pagination.core.pagination.strategy import PaginationStrategy, SortColumn, sort

__all__ = [
    "DEFAULT_CONVERTERS",
    # Predicates
    "And",
    # Codecs
    "BinaryCursorCodec",
    "Compare",
    # Schemas
    "Connection",
    # Converters
    "ConverterRegistry",
    "CursorCodec",
    "CursorPage",
    # Enums
    "Direction",
    "Disposition",
    "Edge",
    "JSONCursorCodec",
    "Operator",
    "Or",
    # Results
    "Page",
    "PageInfo",
    "PageOptions",
    "PaginationPlanner",
    "PaginationResult",
    "PaginationStrategy",
    # Orchestration
    "Paginator",
    "PagingDirection",
    "Predicate",
    "SignedCursorCodec",
    "SortColumn",
    "TaggedValue",
    "ValueConverter",
    "codec_from_settings",
    "decode_cursor",
    "encode_cursor",
    "get_codec",
    "paginate",
    "paginate_or_raise",
    "sort",
    "validate_option_mapping",
    "validate_options",
]
