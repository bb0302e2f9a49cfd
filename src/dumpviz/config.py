"""
dumpviz Configuration

Settings are loaded from:
1. Environment variables (prefixed with DUMPVIZ_)
2. ~/.dumpviz/.env file

Key settings:
- DUMPVIZ_LOG_LEVEL: Logging level for the CLI (default: WARNING)
- DUMPVIZ_DEFAULT_DEPTH: How many levels `dumpviz show` expands by default
- DUMPVIZ_CHILD_LIMIT: Show at most this many rows under each parent
- DUMPVIZ_SORT_COLUMN: Column to sort rows by (kind, name, size, retained, percent, type)

Command-line options take precedence over these values.
"""

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SORT_COLUMNS = ("kind", "name", "size", "retained", "percent", "type")


class Settings(BaseSettings):
    """dumpviz configuration settings."""

    app_name: str = "dumpviz"

    log_level: str = "WARNING"

    # Tree display
    default_depth: int = 1
    child_limit: Optional[int] = None
    sort_column: Optional[str] = None
    sort_descending: bool = True

    # Width hints per column (Kind, Name, Bytes, Bytes R, %, Type), None = auto
    column_widths: List[Optional[int]] = [20, None, 10, 10, 8, None]
    code_style: str = "dim"
    show_help_footer: bool = False

    model_config = SettingsConfigDict(
        env_prefix="DUMPVIZ_",
        env_file=Path.home() / ".dumpviz" / ".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("sort_column")
    @classmethod
    def _known_column(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in SORT_COLUMNS:
            raise ValueError(f"sort_column must be one of {', '.join(SORT_COLUMNS)}")
        return value

    @field_validator("default_depth")
    @classmethod
    def _non_negative_depth(cls, value: int) -> int:
        if value < 0:
            raise ValueError("default_depth must be >= 0")
        return value

    @field_validator("child_limit")
    @classmethod
    def _non_negative_limit(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("child_limit must be >= 0")
        return value


settings = Settings()
