"""Query backends the paginator can drive.

    - PageableQuery: Protocol every backend implements
    - SelectQuery: SQLAlchemy ``Select`` bound to a ``Session``/``AsyncSession``
    - InMemoryQuery: Plain sequence of records
"""

from keyset_pagination.core.database.memory import InMemoryQuery
from keyset_pagination.core.database.query import PageableQuery, Row
from keyset_pagination.core.database.sqlalchemy_query import SelectQuery, to_clause

__all__ = ["InMemoryQuery", "PageableQuery", "Row", "SelectQuery", "to_clause"]
