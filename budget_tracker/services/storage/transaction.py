"""
Staged Multi-Table Writes

Google Sheets has no transactions. A payment touches two tables
(append to Payments, update Loans), and a crash between the two
leaves the ledger inconsistent.

DESIGN DECISION: Compound writes are staged first and applied in
order on commit. If a step fails, the steps already applied are
compensated in reverse order:

    append  -> delete the appended row
    update  -> write the previous values back
    delete  -> re-insert the deleted row

The previous values come from a local mirror of each touched table,
read once at the start of commit and kept in step with every write.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from budget_tracker.services.storage.interface import (
    StorageError,
    TableStoreInterface,
)


@dataclass
class _StagedWrite:
    kind: str  # append | update | update_cells | delete
    table: str
    position: Optional[int] = None
    row: Optional[list[str]] = None
    first_column: int = 1


class TableTransaction:
    """
    Collects writes and applies them as one unit.

    Usage:
        with store.transaction() as tx:
            tx.append("Payments", row)
            tx.update_cells("Loans", 0, 6, [interest, balance])
        # committed here; nothing is written if the block raised
    """

    def __init__(self, store: TableStoreInterface):
        self._store = store
        self._staged: list[_StagedWrite] = []
        self._committed = False
        self._logger = structlog.get_logger(__name__)

    def __enter__(self) -> "TableTransaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self._staged.clear()
        return False

    def __len__(self) -> int:
        return len(self._staged)

    def append(self, table: str, row: list[str]) -> None:
        self._staged.append(_StagedWrite("append", table, row=list(row)))

    def update(self, table: str, position: int, row: list[str]) -> None:
        self._staged.append(_StagedWrite("update", table, position, list(row)))

    def update_cells(
        self,
        table: str,
        position: int,
        first_column: int,
        values: list[str],
    ) -> None:
        self._staged.append(
            _StagedWrite("update_cells", table, position, list(values), first_column)
        )

    def delete(self, table: str, position: int) -> None:
        self._staged.append(_StagedWrite("delete", table, position))

    def commit(self) -> None:
        """
        Apply staged writes in order.

        Raises:
            StorageError: If a write fails (after compensating earlier writes)
        """
        if self._committed:
            raise StorageError("Transaction already committed")
        self._committed = True

        mirrors: dict[str, list[list[str]]] = {}
        undo: list[tuple[str, Callable[[], None]]] = []

        for step, write in enumerate(self._staged):
            try:
                if write.table not in mirrors:
                    mirrors[write.table] = self._store.read_all_rows(write.table)
                rows = mirrors[write.table]
                undo.append(self._apply(write, rows))
            except Exception as e:
                self._logger.error(
                    "transaction_step_failed",
                    step=step,
                    kind=write.kind,
                    table=write.table,
                    position=write.position,
                    error=str(e),
                )
                rolled_back = self._rollback(undo)
                state = "rolled back" if rolled_back else "rollback incomplete"
                raise StorageError(
                    f"Failed to {write.kind.replace('_', ' ')} {write.table} "
                    f"({state}): {e}"
                ) from e

        self._staged.clear()

    def _apply(
        self,
        write: _StagedWrite,
        rows: list[list[str]],
    ) -> tuple[str, Callable[[], None]]:
        """Apply one write to the store and the mirror; return its compensation."""
        store = self._store
        table = write.table
        position = write.position

        if write.kind == "append":
            new_position = store.append_row(table, write.row)
            rows.append(list(write.row))
            return f"delete {table}[{new_position}]", lambda: store.delete_row(table, new_position)

        if write.kind == "update":
            previous = list(rows[position])
            store.update_row(table, position, write.row)
            rows[position] = list(write.row)
            return (
                f"restore {table}[{position}]",
                lambda: store.update_row(table, position, previous),
            )

        if write.kind == "update_cells":
            start = write.first_column - 1
            end = start + len(write.row)
            current = rows[position] + [""] * max(0, end - len(rows[position]))
            previous_cells = current[start:end]
            store.update_cells(table, position, write.first_column, write.row)
            current[start:end] = write.row
            rows[position] = current
            return (
                f"restore cells {table}[{position}]",
                lambda: store.update_cells(table, position, write.first_column, previous_cells),
            )

        if write.kind == "delete":
            previous = list(rows[position])
            store.delete_row(table, position)
            del rows[position]
            return (
                f"reinsert {table}[{position}]",
                lambda: store.insert_row(table, position, previous),
            )

        raise StorageError(f"Unknown staged write: {write.kind}")

    def _rollback(self, undo: list[tuple[str, Callable[[], None]]]) -> bool:
        """Run compensations newest first. Returns False if any failed."""
        complete = True
        for description, action in reversed(undo):
            try:
                action()
            except Exception as e:
                complete = False
                self._logger.error(
                    "transaction_rollback_failed",
                    action=description,
                    error=str(e),
                )
        return complete
