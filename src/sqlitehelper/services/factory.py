"""Factory functions for creating table handles.

Provides a production factory that resolves the database file from options
and a test factory that uses an in-memory database for fast, isolated tests.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from sqlalchemy import Engine, create_engine

from sqlitehelper.models.options import TableOptions
from sqlitehelper.services.table import SQLiteTable


def create_engine_from_path(db_path: str) -> Engine:
    """Create a SQLAlchemy engine for the given database path.

    Args:
        db_path: Path to SQLite database file, or ":memory:" for in-memory.

    Returns:
        Engine instance using the pysqlite driver.
    """
    if db_path == ":memory:":
        # SQLAlchemy keeps a single connection per thread for :memory:, so the
        # database survives across connect() calls.
        url = "sqlite:///:memory:"
    else:
        url = f"sqlite:///{db_path}"
    return create_engine(url)


def _resolve_options(options: TableOptions | Mapping[str, Any] | None, overrides: dict[str, Any]) -> TableOptions:
    base = options if isinstance(options, TableOptions) else TableOptions.model_validate(options or {})
    if not overrides:
        return base
    # Overrides may use either key style, so normalize them before merging.
    explicit = TableOptions.model_validate(overrides).model_dump(by_alias=True, exclude_unset=True)
    return TableOptions.model_validate({**base.model_dump(by_alias=True), **explicit})


def create_table(
    options: TableOptions | Mapping[str, Any] | None = None,
    logger: structlog.stdlib.BoundLogger | None = None,
    **overrides: Any,
) -> SQLiteTable:
    """Open (and if needed create) a table in a file-backed database.

    The database directory is resolved against the working directory and
    created when missing.

    Args:
        options: TableOptions or a mapping of option keys (``tableName``,
            ``dir``, ``filename``, ``columns``, ``caching``, ``fetchAll``, ``wal``).
        logger: Logger shared with the handle.
        **overrides: Option keys applied on top of ``options``.

    Returns:
        A ready SQLiteTable that owns its engine.

    Example:
        foods = create_table(tableName="foods", columns={"name": "text", "price": "int"}, wal=True)
    """
    logger = logger or structlog.get_logger(__name__)
    resolved = _resolve_options(options, overrides)

    db_path = resolved.database_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine_from_path(str(db_path))
    logger.debug("engine_created", db_path=str(db_path))
    return SQLiteTable(engine=engine, options=resolved, logger=logger, owns_engine=True)


def create_test_table(
    options: TableOptions | Mapping[str, Any] | None = None,
    logger: structlog.stdlib.BoundLogger | None = None,
    **overrides: Any,
) -> SQLiteTable:
    """Create a SQLiteTable backed by an in-memory database for testing.

    Each call creates an independent database, so tests don't interfere.
    ``dir`` and ``filename`` are ignored.
    """
    logger = logger or structlog.get_logger(__name__)
    resolved = _resolve_options(options, overrides)
    engine = create_engine_from_path(":memory:")
    return SQLiteTable(engine=engine, options=resolved, logger=logger, owns_engine=True)
