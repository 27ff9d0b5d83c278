"""sqlitehelper - Object-shaped access to a single SQLite table with a local read cache."""

from importlib.metadata import version, PackageNotFoundError

from sqlitehelper.errors import (
    ConfigConflictError,
    HandleNotReadyError,
    InvalidInputError,
    SchemaRequiredError,
    SQLiteHelperError,
)
from sqlitehelper.logs import configure_logging
from sqlitehelper.models.options import TableOptions
from sqlitehelper.models.row_intent import RowIntent
from sqlitehelper.services.factory import create_table, create_test_table
from sqlitehelper.services.table import SQLiteTable

try:
    __version__ = version("sqlitehelper")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "__version__",
    "ConfigConflictError",
    "HandleNotReadyError",
    "InvalidInputError",
    "RowIntent",
    "SQLiteHelperError",
    "SQLiteTable",
    "SchemaRequiredError",
    "TableOptions",
    "configure_logging",
    "create_table",
    "create_test_table",
]
