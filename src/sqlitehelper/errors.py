"""Exceptions raised by sqlitehelper.

Store failures are not wrapped: SQLAlchemy errors reach the caller unchanged.
"""


class SQLiteHelperError(Exception):
    """Base exception for sqlitehelper."""


class SchemaRequiredError(SQLiteHelperError):
    """Raised when the table does not exist and no columns were provided."""

    def __init__(self, table_name: str) -> None:
        super().__init__(
            f'No columns were provided and the "{table_name}" table does not exist. '
            "Columns are required to create the table."
        )
        self.table_name = table_name


class ConfigConflictError(SQLiteHelperError):
    """Raised when construction options contradict each other."""


class InvalidInputError(SQLiteHelperError):
    """Raised when a write payload or lookup argument is malformed."""


class HandleNotReadyError(SQLiteHelperError):
    """Raised when an operation is attempted on a handle that is not ready."""
