"""Table handle: object-shaped reads and writes against one SQLite table.

Writes are built by the statement builder and executed through SQLAlchemy's
synchronous engine. Reads go through an optional in-process RowCache. The
cache is only mutated after the store accepted a write, so it never reflects
a rejected change.

The cache is local to one handle. Two handles on the same file do not see
each other's cached rows and may serve stale data for rows changed through
the other handle.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

import structlog
from sqlalchemy import Engine, inspect

from sqlitehelper.errors import ConfigConflictError, HandleNotReadyError, InvalidInputError, SchemaRequiredError
from sqlitehelper.models.enums import HandleState
from sqlitehelper.models.options import TableOptions
from sqlitehelper.models.query import QueryDescriptor
from sqlitehelper.models.row_intent import RowIntent
from sqlitehelper.services import statement_builder
from sqlitehelper.services.row_cache import Row, RowCache, row_matches
from sqlitehelper.services.row_codec import decode_row, decode_value

ChangeCallback = Callable[[Row], Any]

_MISSING: Any = object()


class SQLiteTable:
    """Get/set/has/ensure/delete access to a single table with a read cache.

    Accepts a SQLAlchemy Engine via dependency injection so that persistent
    and in-memory databases can be used interchangeably. Use
    ``sqlitehelper.create_table`` to build one from file options.
    """

    def __init__(
        self,
        engine: Engine,
        options: TableOptions | Mapping[str, Any] | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
        owns_engine: bool = False,
    ) -> None:
        self._engine = engine
        self._options = options if isinstance(options, TableOptions) else TableOptions.model_validate(options or {})
        self._logger = logger or structlog.get_logger(__name__)
        self._owns_engine = owns_engine
        self._cache = RowCache()
        self._changed_callback: ChangeCallback | None = None
        self._state = HandleState.INITIALIZING

        try:
            self._initialize()
        except Exception:
            self._state = HandleState.FAILED
            raise
        self._state = HandleState.READY

    def __enter__(self) -> "SQLiteTable":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    @property
    def name(self) -> str:
        return self._options.table_name

    @property
    def options(self) -> TableOptions:
        return self._options

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def cache(self) -> RowCache:
        return self._cache

    @property
    def state(self) -> HandleState:
        return self._state

    def close(self) -> None:
        """Clear the cache and release pooled connections owned by this handle."""
        self._cache.clear()
        if self._owns_engine:
            self._engine.dispose()
        self._logger.info("table_closed", table=self.name)

    def _initialize(self) -> None:
        if self._options.wal:
            with self._engine.connect() as conn:
                mode = conn.exec_driver_sql("PRAGMA journal_mode = wal").scalar()
            self._logger.debug("journal_mode_set", table=self.name, journal_mode=mode)

        if not inspect(self._engine).has_table(self.name):
            if not self._options.columns:
                raise SchemaRequiredError(self.name)
            statement = statement_builder.build_create_table(self.name, self._options.columns)
            with self._engine.begin() as conn:
                conn.exec_driver_sql(statement)
            self._logger.info("table_created", table=self.name, columns=list(self._options.columns))

        if self._options.fetch_all:
            if not self._options.caching:
                raise ConfigConflictError(
                    "fetch_all was enabled but caching was not. Rows cannot be loaded into a cache "
                    "that does not exist; either disable fetch_all or enable caching."
                )
            for row in self._select_all():
                self._cache.insert(row)
            self._logger.info("cache_seeded", table=self.name, row_count=len(self._cache))

        self._logger.info(
            "table_initialized",
            table=self.name,
            caching=self._options.caching,
            fetch_all=self._options.fetch_all,
            wal=self._options.wal,
        )

    def _require_ready(self) -> None:
        if self._state is not HandleState.READY:
            raise HandleNotReadyError(f"table handle for {self.name!r} is {self._state}")

    def get(self, column_name: str, column_value: Any) -> Row | None:
        """Find the first row whose column equals the given value.

        Cache hits return the cached row object itself, without a store call.

        Args:
            column_name: Column to search by.
            column_value: Value the column must equal.

        Returns:
            The materialized row, or None if no row matches.
        """
        self._require_ready()
        if self._options.caching:
            found = self._cache.find_by_column(column_name, self._lookup_value(column_value))
            if found is not None:
                self._logger.debug("cache_hit", table=self.name, column=column_name)
                return found[1]
            self._logger.debug("cache_miss", table=self.name, column=column_name)

        statement = statement_builder.build_select(self.name, column_name)
        with self._engine.connect() as conn:
            record = conn.exec_driver_sql(statement, (statement_builder.bind_value(column_value),)).mappings().first()

        row = decode_row(record)
        if row is not None and self._options.caching:
            self._remember(row)
        return row

    def _remember(self, row: Row) -> None:
        """Cache a row read from the store, replacing an entry it already covers."""
        found = self._cache.find(lambda entry: row_matches(row, entry))
        if found is None:
            self._cache.insert(row)
        else:
            self._cache.replace_at(found[0], row)

    @staticmethod
    def _lookup_value(value: Any) -> Any:
        """The form a lookup value takes once stored and read back, as held in the cache."""
        return decode_value(statement_builder.bind_value(value))

    def get_all(self) -> list[Row]:
        """Return every row of the table in scan order. Does not seed the cache."""
        self._require_ready()
        return self._select_all()

    def _select_all(self) -> list[Row]:
        with self._engine.connect() as conn:
            records = conn.exec_driver_sql(statement_builder.build_select_all(self.name)).mappings().all()
        return [decode_row(record) for record in records]

    def set(
        self,
        row_or_rows: RowIntent | Mapping[str, Any] | Sequence[RowIntent | Mapping[str, Any]],
    ) -> Row | list[Row]:
        """Insert or update one or more rows in a single transaction.

        Each row is a RowIntent or a mapping. A mapping with a ``columns`` key
        is read as ``{"columns": ..., "where": ...}``; any other mapping is
        inserted as-is.

        Args:
            row_or_rows: A single row intent or a list of them.

        Returns:
            The merged row for a single intent, otherwise the list of merged rows.
            Without a cached copy of an updated row only the written columns
            are returned.

        Raises:
            InvalidInputError: If any payload is malformed. Nothing is written.
            sqlalchemy.exc.SQLAlchemyError: If the store rejects a statement.
                The whole batch is rolled back and the cache is untouched.
        """
        self._require_ready()
        intents = self._normalize_intents(row_or_rows)
        queries = [statement_builder.build_query(self.name, intent) for intent in intents]

        self._execute_batch(queries)

        results = []
        for intent in intents:
            merged = self._merge_into_cache(intent)
            if self._changed_callback is not None:
                self._changed_callback(merged)
            results.append(merged)

        self._logger.debug(
            "rows_set",
            table=self.name,
            row_count=len(results),
            update_count=sum(1 for intent in intents if intent.is_update),
        )

        if len(results) == 1:
            return results[0]
        return results

    def _normalize_intents(self, row_or_rows: Any) -> list[RowIntent]:
        if isinstance(row_or_rows, (RowIntent, Mapping)):
            return [RowIntent.from_input(row_or_rows)]
        if isinstance(row_or_rows, (list, tuple)):
            return [RowIntent.from_input(row) for row in row_or_rows]
        raise InvalidInputError(
            "No rows were provided or their type was invalid. Pass a mapping or RowIntent "
            "for a single row, or a list of them for several rows."
        )

    def _execute_batch(self, queries: list[QueryDescriptor]) -> None:
        if not queries:
            return
        with self._engine.begin() as conn:
            for query in queries:
                conn.exec_driver_sql(query.statement, query.parameters)

    def _merge_into_cache(self, intent: RowIntent) -> Row:
        """Merge a committed intent over its cached base and update the cache."""
        base: Row = {}
        position = None
        criteria = None
        if self._options.caching and intent.where is not None:
            criteria = {key: self._lookup_value(value) for key, value in intent.where.items()}
            found = self._cache.find_matching(criteria)
            if found is not None:
                position, base = found

        merged = {**base, **decode_row(intent.columns)}

        if not self._options.caching:
            return merged

        if position is not None:
            self._cache.replace_at(position, merged)
            # Every other cached row matching the predicate was updated too.
            self._cache.remove_matching(lambda row: row is not merged and row_matches(row, criteria))
        elif intent.where is None:
            self._cache.insert(merged)
        return merged

    def has(self, column_name: str, column_value: Any) -> bool:
        return self.get(column_name, column_value) is not None

    def ensure(self, column_name: str, column_value: Any, ensure_value: Mapping[str, Any]) -> Row:
        """Return the matching row, inserting ``ensure_value`` if there is none.

        ``ensure_value`` is expected to contain ``column_name: column_value``;
        this is not checked.
        """
        existing = self.get(column_name, column_value)
        if existing is not None:
            return existing
        return self.set(RowIntent.from_input({"columns": ensure_value}))

    def delete(self, column_name: str, column_value: Any) -> int:
        """Delete every row whose column equals the given value.

        Returns:
            Number of rows deleted.
        """
        self._require_ready()
        statement = statement_builder.build_delete(self.name, column_name)
        with self._engine.begin() as conn:
            deleted = conn.exec_driver_sql(statement, (statement_builder.bind_value(column_value),)).rowcount

        evicted = 0
        if self._options.caching:
            criteria = {column_name: self._lookup_value(column_value)}
            evicted = self._cache.remove_matching(lambda row: row_matches(row, criteria))

        self._logger.debug("rows_deleted", table=self.name, column=column_name, row_count=deleted, evicted=evicted)
        return deleted

    def uncache(self, column_name: str | None = None, column_value: Any = _MISSING) -> bool:
        """Remove matching rows from the cache, or every row when called without arguments.

        Returns:
            False if caching is disabled. With a column and value, whether any
            entry was removed. Without arguments, True once the cache is empty.
        """
        self._require_ready()
        if not self._options.caching:
            return False

        if column_name is None:
            self._cache.clear()
            self._logger.debug("cache_cleared", table=self.name)
            return len(self._cache) == 0

        if column_value is _MISSING:
            raise InvalidInputError("uncache requires a column value when a column name is given")

        criteria = {column_name: self._lookup_value(column_value)}
        removed = self._cache.remove_matching(lambda row: row_matches(row, criteria))
        return removed > 0

    def indexes(self, column_name: str) -> list[Any]:
        """Return the value of one column for every row, bypassing the cache."""
        self._require_ready()
        statement = statement_builder.build_select_column(self.name, column_name)
        with self._engine.connect() as conn:
            values = conn.exec_driver_sql(statement).scalars().all()
        return [decode_value(value) for value in values]

    def changed(self, callback: ChangeCallback | None) -> None:
        """Register the callback invoked with each merged row after ``set`` commits.

        Only one callback is kept; registering replaces the previous one and
        None removes it.
        """
        self._changed_callback = callback
