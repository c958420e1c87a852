"""Unit tests for pagination argument validation."""
from __future__ import annotations

import pytest

from keyset_pagination.core.exceptions import (
    InvalidArgumentCombinationError,
    InvalidInvertedFlagError,
    PageSizeOutOfRangeError,
    PaginationValidationError,
)
from keyset_pagination.core.pagination.enums import Disposition, PagingDirection
from keyset_pagination.core.pagination.options import (
    PageOptions,
    validate_option_mapping,
    validate_options,
)


@pytest.mark.unit
class TestValidateOptions:
    """Tests for validate_options."""

    def test_first(self):
        options = validate_options("s", max_page_size=10, first=5)

        assert options == PageOptions(
            strategy="s",
            cursor=None,
            paging_direction=PagingDirection.FORWARD,
            disposition=Disposition.REGULAR,
            page_size=5,
            max_page_size=10,
        )
        assert options.fetch_limit == 6

    def test_first_after(self):
        options = validate_options("s", max_page_size=10, first=3, after="abc")

        assert options.cursor == "abc"
        assert options.paging_direction is PagingDirection.FORWARD

    def test_last_before(self):
        options = validate_options("s", max_page_size=10, last=3, before="abc")

        assert options.cursor == "abc"
        assert options.paging_direction is PagingDirection.BACKWARD

    def test_last(self):
        options = validate_options("s", max_page_size=10, last=3)

        assert options.cursor is None
        assert options.paging_direction is PagingDirection.BACKWARD

    def test_inverted(self):
        options = validate_options("s", max_page_size=10, first=1, inverted=True)

        assert options.disposition is Disposition.INVERTED

    def test_none_means_absent(self):
        """Explicit None values are treated as not supplied."""
        options = validate_options("s", max_page_size=10, first=2, last=None, before=None)

        assert options.page_size == 2

    @pytest.mark.parametrize(
        ("kwargs", "provided"),
        [
            ({}, []),
            ({"first": 1, "last": 1}, ["first", "last"]),
            ({"first": 1, "before": "c"}, ["first", "before"]),
            ({"last": 1, "after": "c"}, ["last", "after"]),
            ({"after": "c"}, ["after"]),
            ({"before": "c"}, ["before"]),
            ({"first": 1, "after": "c", "before": "d"}, ["first", "after", "before"]),
            ({"first": 1, "last": 2, "after": "c", "before": "d"}, ["first", "last", "after", "before"]),
        ],
    )
    def test_invalid_combinations(self, kwargs, provided):
        """Only {first}, {first, after}, {last}, {last, before} are accepted."""
        with pytest.raises(InvalidArgumentCombinationError) as exc_info:
            validate_options("s", max_page_size=10, **kwargs)

        assert exc_info.value.provided == provided

    def test_invalid_combination_message(self):
        """The message names the keys and lists the valid combinations."""
        with pytest.raises(InvalidArgumentCombinationError) as exc_info:
            validate_options("s", max_page_size=10, first=1, last=1)

        assert exc_info.value.message == (
            "Invalid pagination params: [first, last]. Valid combinations are: "
            "[first] | [first, after] | [last] | [last, before]."
        )

    @pytest.mark.parametrize("page_size", [0, 1, 10])
    def test_page_size_bounds_inclusive(self, page_size):
        assert validate_options("s", max_page_size=10, first=page_size).page_size == page_size

    @pytest.mark.parametrize("page_size", [-1, 11, 1000, 2.0, "5", True])
    def test_page_size_out_of_range(self, page_size):
        """Negative, too large, non-integer and bool sizes are rejected."""
        with pytest.raises(PageSizeOutOfRangeError) as exc_info:
            validate_options("s", max_page_size=10, last=page_size)

        assert exc_info.value.details == {"page_size": page_size, "max_page_size": 10}
        assert isinstance(exc_info.value, PaginationValidationError)


@pytest.mark.unit
class TestValidateOptionMapping:
    """Tests for validate_option_mapping."""

    def test_mapping(self):
        options = validate_option_mapping(
            "s", {"last": 4, "before": "c", "inverted": True}, max_page_size=10
        )

        assert options.page_size == 4
        assert options.cursor == "c"
        assert options.disposition is Disposition.INVERTED

    def test_unknown_keys_rejected(self):
        """Typos never pass silently."""
        with pytest.raises(InvalidArgumentCombinationError) as exc_info:
            validate_option_mapping("s", {"first": 1, "aftr": "c"}, max_page_size=10)

        assert exc_info.value.provided == ["first", "aftr"]

    def test_none_values_ignored(self):
        options = validate_option_mapping(
            "s", {"first": 2, "after": None, "last": None}, max_page_size=10
        )

        assert options.cursor is None

    @pytest.mark.parametrize("inverted", [False, None])
    def test_inverted_false_or_absent_is_regular(self, inverted):
        options = validate_option_mapping(
            "s", {"first": 2, "inverted": inverted}, max_page_size=10
        )

        assert options.disposition is Disposition.REGULAR

    @pytest.mark.parametrize("inverted", ["false", "0", "true", 1, 0, []])
    def test_inverted_must_be_a_bool(self, inverted):
        """Raw query-string values are never read as truthy."""
        with pytest.raises(InvalidInvertedFlagError) as exc_info:
            validate_option_mapping("s", {"first": 2, "inverted": inverted}, max_page_size=10)

        assert isinstance(exc_info.value, PaginationValidationError)
        assert exc_info.value.details == {"type": type(inverted).__name__}
