"""FastAPI dependency collecting keyset pagination query parameters.

Validation is left to the paginator so HTTP and non-HTTP callers share one
set of rules; this dependency only gathers what the client sent.

Usage:
    from keyset_pagination.core.dependencies import KeysetArgs

    @router.get("/users", response_model=CursorPage[UserResponse])
    async def list_users(session: SessionDep, args: KeysetArgs) -> CursorPage[UserResponse]:
        result = await paginator.apaginate(SelectQuery(select(User), session), "by_name", **args)
        if not result.ok:
            raise HTTPException(status_code=400, detail=result.error.message)
        return result.page.to_cursor_page()

Client navigation:
    GET /users?first=20
    GET /users?first=20&after=<end_cursor>
    GET /users?last=20&before=<start_cursor>
    GET /users?first=20&inverted=true
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Query


def get_keyset_args(
    first: Annotated[
        int | None,
        Query(description="Number of rows to return from the start (or after `after`)"),
    ] = None,
    last: Annotated[
        int | None,
        Query(description="Number of rows to return from the end (or before `before`)"),
    ] = None,
    after: Annotated[
        str | None,
        Query(description="Cursor to continue forward from (use with `first`)"),
    ] = None,
    before: Annotated[
        str | None,
        Query(description="Cursor to continue backward from (use with `last`)"),
    ] = None,
    inverted: Annotated[
        bool,
        Query(description="Reverse the sort order of every column"),
    ] = False,
) -> dict[str, Any]:
    """Collect the supplied pagination parameters.

    Parameters the client did not send are left out, so the mapping can be
    splatted straight into ``Paginator.paginate(query, strategy, **args)``.
    """
    args: dict[str, Any] = {
        key: value
        for key, value in (("first", first), ("last", last), ("after", after), ("before", before))
        if value is not None
    }
    if inverted:
        args["inverted"] = True
    return args


KeysetArgs = Annotated[dict[str, Any], Depends(get_keyset_args)]


__all__ = ["KeysetArgs", "get_keyset_args"]
