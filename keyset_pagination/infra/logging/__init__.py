"""Logging infrastructure.

Basic usage:
    import logging

    from keyset_pagination.infra.logging import get_lazy_logger, setup_logging

    setup_logging()  # once, at host startup

    logger = logging.getLogger(__name__)
    logger.info("Page served", extra={"operation": "pagination.paginate"})

    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"Expensive: {describe(predicate)}")
"""

from keyset_pagination.infra.logging.config import configure_logging, setup_logging
from keyset_pagination.infra.logging.formatters import JSONFormatter
from keyset_pagination.infra.logging.lazy import (
    LazyLoggerAdapter,
    LazyString,
    get_lazy_logger,
    lazy,
)

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "LazyString",
    "configure_logging",
    "get_lazy_logger",
    "lazy",
    "setup_logging",
]
