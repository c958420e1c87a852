"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: environment isolation for cached settings
    - Record Fixtures: small record sets used across pagination tests
    - Planner Fixtures: registered strategies and a ready paginator
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass

import pytest

from keyset_pagination.core.database import InMemoryQuery
from keyset_pagination.core.pagination import (
    BinaryCursorCodec,
    PaginationPlanner,
    Paginator,
    sort,
)
from keyset_pagination.core.settings import clear_all_caches

# Keep a developer's shell from leaking into settings tests
for _name in list(os.environ):
    if _name.startswith(("PAGINATION_", "LOG_")):
        del os.environ[_name]


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Clear cached settings before and after every test."""
    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Record Fixtures
# ============================================================================


@dataclass(frozen=True)
class Person:
    """Minimal record used by in-memory pagination tests."""

    id: int
    last_name: str
    first_name: str = ""
    age: int = 0


@pytest.fixture
def people() -> list[Person]:
    """Four people; two share a last name so the id tie-breaker matters."""
    return [
        Person(id=1, last_name="Brown", first_name="Ada", age=31),
        Person(id=2, last_name="Adams", first_name="Ben", age=45),
        Person(id=3, last_name="Brown", first_name="Cy", age=27),
        Person(id=4, last_name="Clark", first_name="Di", age=38),
    ]


@pytest.fixture
def people_query(people: list[Person]) -> InMemoryQuery:
    return InMemoryQuery(people)


# ============================================================================
# Planner Fixtures
# ============================================================================


@pytest.fixture
def planner() -> PaginationPlanner:
    """Planner with the strategies used throughout the suite.

    Strategies:
        by_name: last_name ASC, id DESC
        by_id: id ASC
        by_age_desc: age DESC, id ASC
    """
    planner = PaginationPlanner()
    planner.paginate_by(
        "by_name",
        sort("asc", "last_name", value_type=str),
        sort("desc", "id", value_type=int),
    )
    planner.paginate_by("by_id", sort("asc", "id", value_type=int))
    planner.paginate_by(
        "by_age_desc",
        sort("desc", "age", value_type=int),
        sort("asc", "id", value_type=int),
    )
    return planner.freeze()


@pytest.fixture
def paginator(planner: PaginationPlanner) -> Paginator:
    return Paginator(planner, codec=BinaryCursorCodec(), max_page_size=10)
