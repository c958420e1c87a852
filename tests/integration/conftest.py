"""Shared fixtures for SQLAlchemy integration tests.

Both fixtures seed the same ``User`` rows into an in-memory SQLite
database: ``sync_session`` through ``Session``, ``async_session`` through
``AsyncSession`` on aiosqlite.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Iterator
from datetime import datetime, timedelta

import pytest
from sqlalchemy import DateTime, String, Uuid, create_engine, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from keyset_pagination.core.pagination import (
    JSONCursorCodec,
    PaginationPlanner,
    Paginator,
    sort,
)

NULL_NAME = "~~~~~"
_BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)
_LAST_NAMES = ["Adams", "Brown", None, "Clark", "Brown"]


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    public_id: Mapped[uuid.UUID] = mapped_column(Uuid, unique=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    inserted_at: Mapped[datetime] = mapped_column(DateTime)


def build_users(count: int = 23) -> list[User]:
    """Rows with repeated names, NULL names and shared timestamps."""
    return [
        User(
            id=i,
            public_id=uuid.UUID(int=(i * 7919) % 1000 + 1),
            last_name=_LAST_NAMES[i % len(_LAST_NAMES)],
            inserted_at=_BASE_TIME + timedelta(minutes=i // 3),
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def users() -> list[User]:
    return build_users()


@pytest.fixture
def sql_planner() -> PaginationPlanner:
    planner = PaginationPlanner()
    planner.paginate_by(
        "last_name",
        sort("asc", func.coalesce(User.last_name, NULL_NAME)),
        sort("desc", User.id),
    )
    planner.paginate_by(
        "newest",
        sort("desc", User.inserted_at),
        sort("asc", User.public_id, type_=Uuid()),
    )
    planner.paginate_by("id", sort("asc", User.id))
    planner.freeze()
    return planner


@pytest.fixture(params=["binary", "json"])
def sql_paginator(request, sql_planner: PaginationPlanner) -> Paginator:
    codec = JSONCursorCodec() if request.param == "json" else None
    return Paginator(sql_planner, codec=codec, max_page_size=50)


@pytest.fixture
def sync_session(users: list[User]) -> Iterator[Session]:
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine, expire_on_commit=False) as session:
        session.add_all(users)
        session.commit()
        yield session
    engine.dispose()


@pytest.fixture
async def async_session(users: list[User]) -> AsyncIterator[AsyncSession]:
    engine = create_async_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        session.add_all(users)
        await session.commit()
        yield session
    await engine.dispose()


@pytest.fixture
def user_model() -> type[User]:
    return User
