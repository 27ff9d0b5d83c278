"""In-process mirror of rows already read from or written to a table.

The cache holds no persistence guarantee. It may be empty, partial, or stale
relative to the store; a lost cache only ever costs a store round trip.
"""

from collections.abc import Callable, Iterator, Mapping
from typing import Any

Row = dict[str, Any]


def row_matches(row: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    """True if ``row`` has every key of ``criteria`` with an equal value."""
    return all(key in row and row[key] == value for key, value in criteria.items())


class RowCache:
    """Ordered list of materialized rows looked up by linear scan.

    Entries are not uniquely keyed, so several may match the criteria; the first
    in sequence order wins.
    """

    def __init__(self) -> None:
        self._rows: list[Row] = []

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def snapshot(self) -> list[Row]:
        """Shallow copy of the entries in cache order."""
        return list(self._rows)

    def find_by_column(self, name: str, value: Any) -> tuple[int, Row] | None:
        return self.find_matching({name: value})

    def find_matching(self, criteria: Mapping[str, Any]) -> tuple[int, Row] | None:
        return self.find(lambda row: row_matches(row, criteria))

    def find(self, predicate: Callable[[Row], bool]) -> tuple[int, Row] | None:
        """First entry for which ``predicate`` holds, with its position."""
        for position, row in enumerate(self._rows):
            if predicate(row):
                return position, row
        return None

    def insert(self, row: Row) -> None:
        self._rows.append(row)

    def replace_at(self, position: int, row: Row) -> None:
        self._rows[position] = row

    def remove_matching(self, predicate: Callable[[Row], bool]) -> int:
        """Remove every entry for which ``predicate`` holds.

        Returns:
            Number of entries removed.
        """
        kept = [row for row in self._rows if not predicate(row)]
        removed = len(self._rows) - len(kept)
        self._rows = kept
        return removed

    def clear(self) -> None:
        self._rows.clear()
