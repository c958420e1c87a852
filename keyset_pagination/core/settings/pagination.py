"""Pagination settings.

Environment-level defaults for every paginator that does not receive an
explicit override. Environment variables use the PAGINATION_ prefix.
Example: PAGINATION_MAX_PAGE_SIZE=50, PAGINATION_DEFAULT_CODEC=json
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CodecName = Literal["binary", "json"]


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        max_page_size: Largest ``first``/``last`` value a caller may request.
        default_codec: Cursor codec used when none is passed explicitly.
        max_cursor_length: Cursors longer than this are rejected before decoding.
        signing_key: When set, cursors are HMAC-signed with this key.
        max_sort_columns: Optional ceiling on columns per strategy (None = unbounded).

    Example:
        settings = PaginationSettings(max_page_size=25)
        paginator = Paginator(planner, max_page_size=settings.max_page_size)
    """

    max_page_size: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum page size callers may request",
    )
    default_codec: CodecName = Field(
        default="binary",
        description="Default cursor codec (binary|json)",
    )
    max_cursor_length: int = Field(
        default=4096,
        ge=16,
        le=65536,
        description="Maximum accepted length of an opaque cursor",
    )
    signing_key: SecretStr | None = Field(
        default=None,
        description="HMAC key for signed cursors (None disables signing)",
    )
    max_sort_columns: int | None = Field(
        default=None,
        ge=1,
        description="Maximum sort columns per strategy (None for unbounded)",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
