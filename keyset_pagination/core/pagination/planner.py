"""Registry of named pagination strategies.

Strategies are declared once at startup and then looked up by name on
every pagination call:

    planner = PaginationPlanner()

    planner.paginate_by("username", sort("asc", User.username))

    # Newest first, with the UUID primary key as tie-breaker
    planner.paginate_by(
        "user_created_at",
        sort("desc", User.inserted_at),
        sort("asc", User.public_id, type_=Uuid()),
    )

    # Coalesce nullable names so NULLs sort last instead of being dropped
    planner.paginate_by(
        "last_name",
        sort("asc", func.coalesce(User.last_name, "~~~~~")),
        sort("asc", func.coalesce(User.first_name, "~~~~~")),
        sort("desc", User.id),
    )

    planner.freeze()

After ``freeze()`` the registry is read-only and can be shared across
threads and tasks without locking.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from keyset_pagination.core.exceptions import StrategyDefinitionError, UnknownStrategyError
from keyset_pagination.core.pagination.strategy import PaginationStrategy, SortColumn
from keyset_pagination.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from keyset_pagination.core.settings.pagination import PaginationSettings

_lazy = get_lazy_logger(__name__)


class PaginationPlanner:
    """Name -> ``PaginationStrategy`` registry.

    Args:
        max_sort_columns: Optional ceiling on columns per strategy; ``None``
            allows any number.
    """

    __slots__ = ("_strategies", "_frozen", "max_sort_columns")

    def __init__(self, *, max_sort_columns: int | None = None) -> None:
        self._strategies: dict[str, PaginationStrategy] = {}
        self._frozen = False
        self.max_sort_columns = max_sort_columns

    @classmethod
    def from_settings(cls, settings: PaginationSettings) -> PaginationPlanner:
        return cls(max_sort_columns=settings.max_sort_columns)

    def paginate_by(self, name: str, *columns: SortColumn) -> PaginationStrategy:
        """Compile and register a strategy.

        Raises:
            StrategyDefinitionError: Duplicate name, no columns, too many
                columns, or registry already frozen
        """
        if self.max_sort_columns is not None and len(columns) > self.max_sort_columns:
            raise StrategyDefinitionError(
                f"Strategy {name!r} declares {len(columns)} sort columns; "
                f"at most {self.max_sort_columns} are allowed"
            )
        return self.register(PaginationStrategy(name, columns))

    def register(self, strategy: PaginationStrategy) -> PaginationStrategy:
        if self._frozen:
            raise StrategyDefinitionError(
                f"Cannot register {strategy.name!r}: planner is frozen"
            )
        if strategy.name in self._strategies:
            raise StrategyDefinitionError(
                f"Strategy {strategy.name!r} is already registered"
            )
        self._strategies[strategy.name] = strategy
        _lazy.debug(lambda: f"pagination.register: {strategy!r}")
        return strategy

    def freeze(self) -> PaginationPlanner:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> PaginationStrategy:
        """Look up a strategy.

        Raises:
            UnknownStrategyError: Nothing is registered under ``name``
        """
        try:
            return self._strategies[name]
        except KeyError:
            raise UnknownStrategyError(name, sorted(self._strategies)) from None

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    def __iter__(self) -> Iterator[str]:
        return iter(self._strategies)

    def __len__(self) -> int:
        return len(self._strategies)


__all__ = ["PaginationPlanner"]
