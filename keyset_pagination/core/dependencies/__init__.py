"""FastAPI dependencies for route handlers."""

from keyset_pagination.core.dependencies.pagination import KeysetArgs, get_keyset_args

__all__ = ["KeysetArgs", "get_keyset_args"]
