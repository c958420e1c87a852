"""Logging configuration setup.

Host applications call :func:`setup_logging` once at startup. Handlers are
installed on the root logger through ``logging.config.dictConfig``; library
loggers (``keyset_pagination.*``) propagate up to them.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from keyset_pagination.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
) -> None:
    """Configure logging once across entrypoints.

    Args:
        log_settings: Optional settings instance. Loaded via
            ``get_logging_settings()`` when omitted.
        force: Reconfigure even if logging was already initialized.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if log_settings is None:
        from keyset_pagination.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**log_settings.to_logging_kwargs())
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    static_fields: dict[str, Any] | None = None,
    capture_warnings: bool = True,
) -> None:
    """Install a single console handler on the root logger.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Emit JSON Lines instead of plain text.
        static_fields: Fields added to every JSON record.
        capture_warnings: Forward Python warnings to logging.

    Example:
        configure_logging(log_level="DEBUG", json_logs=False)
    """
    if capture_warnings:
        logging.captureWarnings(True)

    if json_logs:
        formatter: dict[str, Any] = {
            "()": "keyset_pagination.infra.logging.formatters.JSONFormatter",
            "static": static_fields or {},
        }
    else:
        formatter = {
            "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": formatter},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                },
            },
            "root": {"level": log_level, "handlers": ["console"]},
        }
    )
    logger.debug("Logging configured", extra={"level": log_level, "json": json_logs})
