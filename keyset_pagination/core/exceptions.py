"""Pagination exceptions.

Two families live here:

* ``PaginationError`` and its subclasses describe bad caller input
  (argument combinations, page sizes, ordered queries, malformed cursors).
  ``Paginator.paginate`` returns them inside a ``PaginationResult``;
  ``Paginator.paginate_or_raise`` raises them.
* ``CursorError`` subclasses are raised by the cursor codecs themselves.
  The paginator converts them into ``MalformedCursorError`` so that codec
  internals never reach the caller.

Programmer errors (unknown strategy names, invalid strategy declarations)
are always raised, never returned.
"""
from __future__ import annotations

from typing import Any


class PaginationError(Exception):
    """Base exception for pagination failures caused by caller input."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize pagination error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class PaginationValidationError(PaginationError):
    """Invalid pagination arguments."""


class InvalidArgumentCombinationError(PaginationValidationError):
    """The supplied first/last/after/before keys are not a valid combination.

    Attributes:
        provided: Argument names that were supplied, in canonical order
    """

    VALID_COMBINATIONS: tuple[tuple[str, ...], ...] = (
        ("first",),
        ("first", "after"),
        ("last",),
        ("last", "before"),
    )

    def __init__(self, provided: list[str]):
        self.provided = provided
        combos = " | ".join(f"[{', '.join(c)}]" for c in self.VALID_COMBINATIONS)
        message = (
            f"Invalid pagination params: [{', '.join(provided)}]. "
            f"Valid combinations are: {combos}."
        )
        super().__init__(message, details={"provided": provided})


class PageSizeOutOfRangeError(PaginationValidationError):
    """Requested page size is negative, not an integer, or above the maximum."""

    def __init__(self, page_size: Any, max_page_size: int):
        self.page_size = page_size
        self.max_page_size = max_page_size
        message = (
            f"Page size of {page_size!r} was requested, but page size must be "
            f"an integer between 0 and {max_page_size}."
        )
        super().__init__(
            message, details={"page_size": page_size, "max_page_size": max_page_size}
        )


class InvalidInvertedFlagError(PaginationValidationError):
    """``inverted`` was given something other than a boolean."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"inverted must be true or false, got a value of type {type(value).__name__}.",
            details={"type": type(value).__name__},
        )


class AlreadyOrderedError(PaginationError):
    """The query carried its own ORDER BY before pagination was applied."""

    def __init__(self) -> None:
        super().__init__("Query must not be ordered prior to paginating")


class MalformedCursorError(PaginationError):
    """The cursor could not be decoded for the requested strategy.

    The message is deliberately generic; cursors are untrusted input and the
    underlying codec failure is only attached as ``__cause__``.
    """

    def __init__(self, strategy: str):
        self.strategy = strategy
        super().__init__("Invalid cursor", details={"strategy": strategy})


class CursorError(ValueError):
    """Base exception for cursor codec failures."""


class CursorEncodeError(CursorError):
    """A value cannot be represented by the cursor codec."""


class CursorDecodeError(CursorError):
    """An opaque cursor could not be turned back into values."""


class InvalidEncodingError(CursorDecodeError):
    """The text encoding (base64url) of the cursor is malformed."""


class InvalidPayloadError(CursorDecodeError):
    """The decoded bytes are not a well-formed list of cursor values."""


class StrategyDefinitionError(ValueError):
    """A pagination strategy declaration is invalid."""


class UnknownStrategyError(LookupError):
    """No pagination strategy is registered under the requested name.

    This indicates a defect in the calling code and is never converted
    into a ``PaginationResult`` error.
    """

    def __init__(self, name: str, known: list[str]):
        self.name = name
        self.known = known
        super().__init__(
            f"No pagination strategy named {name!r}; registered: {', '.join(known) or 'none'}"
        )


__all__ = [
    "AlreadyOrderedError",
    "CursorDecodeError",
    "CursorEncodeError",
    "CursorError",
    "InvalidArgumentCombinationError",
    "InvalidEncodingError",
    "InvalidInvertedFlagError",
    "InvalidPayloadError",
    "MalformedCursorError",
    "PageSizeOutOfRangeError",
    "PaginationError",
    "PaginationValidationError",
    "StrategyDefinitionError",
    "UnknownStrategyError",
]
