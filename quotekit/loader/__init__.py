"""SQLite loader for the joined quotes structure."""

from quotekit.loader.database import init_database
from quotekit.loader.loader import (
    LoadStats,
    QuoteLoader,
    extract_tags,
    load_file,
    parse_authors_json,
)

__all__ = [
    "LoadStats",
    "QuoteLoader",
    "extract_tags",
    "init_database",
    "load_file",
    "parse_authors_json",
]
