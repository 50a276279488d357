"""
In-Memory Table Store

A list-backed implementation of TableStoreInterface with the same
observable behaviour as the Google Sheets store: header row first,
values stored as strings, positions shift on insert/delete.

Used by the test suite and by the app when Sheets isn't configured.
"""

from typing import Optional

from budget_tracker.services.storage.interface import (
    NotFoundError,
    TableSchema,
    TableStoreInterface,
    build_table_schemas,
)


def _as_cells(row: list) -> list[str]:
    return ["" if value is None else str(value) for value in row]


class InMemoryTableStore(TableStoreInterface):
    """Tables held as lists of string rows (row 0 is the header)."""

    def __init__(
        self,
        schemas: Optional[dict[str, TableSchema]] = None,
        tables: Optional[dict[str, list[list]]] = None,
    ):
        """
        Args:
            schemas: Table schemas used on first creation.
            tables: Pre-existing tables, header row included
                    (e.g. a legacy sheet for the migration).
        """
        self._schemas = schemas if schemas is not None else build_table_schemas()
        self._tables: dict[str, list[list[str]]] = {
            name: [_as_cells(row) for row in rows]
            for name, rows in (tables or {}).items()
        }

    def _table(self, name: str) -> list[list[str]]:
        self.ensure_table(name)
        return self._tables[name]

    def _check(self, table: list[list[str]], name: str, position: int) -> None:
        if position < 0 or position >= len(table) - 1:
            raise NotFoundError(f"No row {position} in table {name}")

    def ensure_table(self, name: str) -> None:
        if name in self._tables:
            return
        schema = self._schemas.get(name)
        if schema is None:
            self._tables[name] = []
            return
        self._tables[name] = [list(schema.columns)] + [
            _as_cells(row) for row in schema.seed_rows
        ]

    def has_table(self, name: str) -> bool:
        return name in self._tables

    def read_all_rows(self, name: str) -> list[list[str]]:
        return [list(row) for row in self._table(name)[1:]]

    def append_row(self, name: str, row: list[str]) -> int:
        table = self._table(name)
        table.append(_as_cells(row))
        return len(table) - 2

    def update_row(self, name: str, position: int, row: list[str]) -> None:
        table = self._table(name)
        self._check(table, name, position)
        table[position + 1] = _as_cells(row)

    def update_cells(
        self,
        name: str,
        position: int,
        first_column: int,
        values: list[str],
    ) -> None:
        table = self._table(name)
        self._check(table, name, position)
        row = table[position + 1]
        end = first_column - 1 + len(values)
        if len(row) < end:
            row.extend([""] * (end - len(row)))
        row[first_column - 1:end] = _as_cells(values)

    def insert_row(self, name: str, position: int, row: list[str]) -> None:
        table = self._table(name)
        if position < 0 or position > len(table) - 1:
            raise NotFoundError(f"Cannot insert at row {position} in table {name}")
        table.insert(position + 1, _as_cells(row))

    def delete_row(self, name: str, position: int) -> None:
        table = self._table(name)
        self._check(table, name, position)
        del table[position + 1]

    def dump(self, name: str) -> list[list[str]]:
        """Full table including header (for inspection in tests)."""
        return [list(row) for row in self._tables.get(name, [])]
