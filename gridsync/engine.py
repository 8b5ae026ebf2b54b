"""
Edit-sync engine: the per-grid state machine.

The engine owns what the grid shows (rows of the current page plus staged new
rows), which cell is selected or being edited, and the ledger of optimistic
saves still waiting for the server. It never talks to the network: it emits
commands through ``dispatch`` and is fed the resulting events through
``handle_event``.

Cell lifecycle: idle -> selected -> editing -> saving -> idle, or back to idle
when an edit is cancelled.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Optional

from tableedit.codec import CellDisplay, ColumnKind, format_cell, parse_boolean, parse_cell_input
from tableedit.core.exceptions import ErrorCode
from tableedit.schemas.table import ColumnInfo, TableSchema

from gridsync.ledger import PendingSave, PendingSaveLedger
from gridsync.state import (
    CellFlag,
    CellPosition,
    CellStatus,
    EditSession,
    Notification,
    SortState,
    StagedRow,
)

logger = logging.getLogger("gridsync")

Dispatch = Callable[[str, Dict[str, Any]], None]


def _same_value(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return a == b or str(a) == str(b)


class EditSyncEngine:
    """
    State machine for one grid.

    Args:
        dispatch: Called with ``(command, payload)`` for every command to send
        page_size: Rows requested per page
    """

    def __init__(self, dispatch: Dispatch, page_size: int = 100):
        self._dispatch = dispatch

        self.schema: Optional[TableSchema] = None
        self.rows: List[Dict[str, Any]] = []
        self.staged: List[StagedRow] = []
        self.total_rows = 0
        self.page = 0
        self.page_size = page_size
        self.loading = False
        self.pagination_loading = False

        self.filters: Dict[str, str] = {}
        self.sort = SortState()

        self.selected: Optional[CellPosition] = None
        self.editing: Optional[EditSession] = None
        self.selected_row: Optional[int] = None

        self.ledger = PendingSaveLedger()
        self.cell_flags: Dict[CellPosition, CellFlag] = {}
        self.notifications: List[Notification] = []

        self.pending_delete: Optional[int] = None
        self.delete_in_progress = False
        self._deleting_key: Any = None

        self.namespaces: List[str] = []
        self.tables: List[str] = []

        self._next_row_id = 1
        self._next_save_seq = 1
        self._next_notification_id = 1
        self._event_handlers: Dict[str, Callable[[Dict[str, Any]], None]] = {
            "namespaceList": self._on_namespace_list,
            "tableList": self._on_table_list,
            "tableSchema": self._on_table_schema,
            "tableData": self._on_table_data,
            "tableLoading": self._on_table_loading,
            "saveCellResult": self._on_save_cell_result,
            "insertRowResult": self._on_insert_row_result,
            "deleteRowResult": self._on_delete_row_result,
            "error": self._on_error,
        }

    # Derived state

    @property
    def columns(self) -> List[ColumnInfo]:
        return self.schema.columns if self.schema else []

    @property
    def primary_key_column(self) -> Optional[str]:
        return self.schema.primary_key_column() if self.schema else None

    @property
    def row_count(self) -> int:
        """Rows on screen: the loaded page followed by staged rows."""
        return len(self.rows) + len(self.staged)

    @property
    def total_pages(self) -> int:
        if self.total_rows <= 0 or self.page_size <= 0:
            return 0
        return math.ceil(self.total_rows / self.page_size)

    @property
    def can_go_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def can_go_prev(self) -> bool:
        return self.page > 0

    @property
    def is_editing(self) -> bool:
        return self.editing is not None

    @property
    def can_delete(self) -> bool:
        return (
            self.selected_row is not None
            and not self.is_staged(self.selected_row)
            and self.selected_row < len(self.rows)
            and self.primary_key_column is not None
            and not self.delete_in_progress
        )

    def is_staged(self, row: int) -> bool:
        return row >= len(self.rows)

    def row_values(self, row: int) -> Dict[str, Any]:
        if self.is_staged(row):
            return self.staged[row - len(self.rows)].values
        return self.rows[row]

    def get_value(self, row: int, col: int) -> Any:
        return self.row_values(row).get(self.columns[col].name)

    def cell_display(self, row: int, col: int) -> CellDisplay:
        return format_cell(self.get_value(row, col), self.columns[col].data_type)

    def is_cell_editable(self, row: int, col: int) -> bool:
        """
        Persisted rows need a primary key to be editable at all, and never edit
        the key itself or read-only columns. Staged rows skip the same columns,
        since the server assigns them.
        """
        if not self._valid(row, col):
            return False
        column = self.columns[col]
        if column.read_only:
            return False
        pk_column = self.primary_key_column
        if self.is_staged(row):
            return column.name != pk_column
        return pk_column is not None and column.name != pk_column

    def _valid(self, row: int, col: int) -> bool:
        return 0 <= row < self.row_count and 0 <= col < len(self.columns)

    def _set_value(self, row: int, col: int, value: Any) -> None:
        self.row_values(row)[self.columns[col].name] = value

    # Browsing

    def request_namespaces(self) -> None:
        self._dispatch("getNamespaces", {})

    def request_tables(self, namespace: str) -> None:
        self._dispatch("getTables", {"namespace": namespace})

    def load_table(self, namespace: str, table_name: str) -> None:
        self._invalidate()
        self._dispatch("selectTable", {"namespace": namespace, "tableName": table_name})

    def _read_payload(self, page: int) -> Dict[str, Any]:
        return {
            "page": page,
            "pageSize": self.page_size,
            "filters": [
                {"column": column, "value": value} for column, value in self.filters.items()
            ],
            "sortColumn": self.sort.column,
            "sortDirection": self.sort.direction,
        }

    def request_page(self, page: int = 0) -> None:
        self._invalidate()
        self.pagination_loading = True
        self._dispatch("requestData", self._read_payload(max(0, page)))

    def next_page(self) -> bool:
        if not self.can_go_next or self.pagination_loading:
            return False
        self._invalidate()
        self.pagination_loading = True
        self._dispatch("paginateNext", self._read_payload(self.page))
        return True

    def prev_page(self) -> bool:
        if not self.can_go_prev or self.pagination_loading:
            return False
        self._invalidate()
        self.pagination_loading = True
        self._dispatch("paginatePrev", self._read_payload(self.page))
        return True

    def refresh(self) -> None:
        self._invalidate()
        self._dispatch("refresh", self._read_payload(self.page))

    def set_filter(self, column: str, value: str) -> None:
        """Filter a column (blank clears it) and return to the first page."""
        if value and value.strip():
            self.filters[column] = value
        else:
            self.filters.pop(column, None)
        self.request_page(0)

    def clear_filters(self) -> None:
        self.filters.clear()
        self.request_page(0)

    def toggle_sort(self, column: str) -> None:
        self.sort.toggle(column)
        self.request_page(0)

    def _invalidate(self) -> None:
        """Positions are about to become meaningless: save the open edit, drop selections."""
        if self.editing:
            self.commit_edit()
        self.selected = None
        self.selected_row = None
        self.pending_delete = None

    # Selection and editing

    def select_cell(self, row: int, col: int) -> bool:
        if not self._valid(row, col):
            return False
        position = CellPosition(row, col)
        if self.editing and self.editing.position != position:
            self.commit_edit()
        self.selected = position
        return True

    def select_row(self, row: int) -> bool:
        if not 0 <= row < self.row_count:
            return False
        if self.editing:
            self.commit_edit()
        self.selected_row = row
        self.pending_delete = None
        return True

    def begin_edit(
        self,
        row: Optional[int] = None,
        col: Optional[int] = None,
        initial_text: Optional[str] = None,
    ) -> bool:
        """
        Open a cell for text editing (the selected cell by default).

        Boolean cells do not open; they toggle instead. ``initial_text``
        replaces the current value, as when typing over a cell.

        Returns:
            True if the cell is now being edited
        """
        if row is None or col is None:
            if self.selected is None:
                return False
            row, col = self.selected.row, self.selected.col
        if not self.is_cell_editable(row, col):
            return False

        if ColumnKind.for_type(self.columns[col].data_type) is ColumnKind.BOOLEAN:
            self.toggle_boolean(row, col)
            return False

        position = CellPosition(row, col)
        if self.editing:
            if self.editing.position == position:
                return True
            self.commit_edit()

        self.selected = position
        value = self.get_value(row, col)
        if initial_text is not None:
            text = initial_text
        else:
            text = "" if value is None else str(value)
        self.editing = EditSession(position=position, original_value=value, text=text)
        flag = self.cell_flags.get(position)
        if flag and flag.status is CellStatus.ERROR:
            del self.cell_flags[position]
        return True

    def set_edit_text(self, text: str) -> None:
        if self.editing:
            self.editing.text = text

    def cancel_edit(self) -> None:
        """Leave the editor without saving; the cell keeps its original value."""
        self.editing = None

    def commit_edit(self) -> bool:
        """
        Leave the editor, keeping the typed value.

        Text the column cannot read is rejected locally: the cell keeps its
        original value and is flagged with a format hint, and nothing is sent.

        Returns:
            True if the value changed
        """
        session = self.editing
        if session is None:
            return False
        # Cleared first so nothing below can re-enter the edit
        self.editing = None

        position = session.position
        column = self.columns[position.col]
        parsed = parse_cell_input(session.text, column)
        if not parsed.ok:
            logger.debug(f"Rejected input for {column.name}: {parsed.hint}")
            self.cell_flags[position] = CellFlag(CellStatus.ERROR, parsed.hint)
            return False

        if parsed.rounded:
            self.notify(f"{column.name}: value rounded to {parsed.value}", context="commitEdit")

        return self._apply_value(position, session.original_value, parsed.value)

    def toggle_boolean(self, row: int, col: int) -> bool:
        """Flip a boolean cell; NULL becomes true."""
        if not self.is_cell_editable(row, col):
            return False
        if ColumnKind.for_type(self.columns[col].data_type) is not ColumnKind.BOOLEAN:
            return False

        position = CellPosition(row, col)
        if self.editing and self.editing.position != position:
            self.commit_edit()
        self.selected = position

        old_value = self.get_value(row, col)
        new_value = 0 if parse_boolean(old_value) else 1
        return self._apply_value(position, old_value, new_value)

    def _apply_value(self, position: CellPosition, old_value: Any, new_value: Any) -> bool:
        """Write a value locally and, for persisted rows, send the save."""
        if _same_value(old_value, new_value):
            return False

        row, col = position.row, position.col
        self._set_value(row, col, new_value)

        if self.is_staged(row):
            self.staged[row - len(self.rows)].error = None
            return True

        pk_column = self.primary_key_column
        column_name = self.columns[col].name
        pk_value = self.rows[row].get(pk_column)

        entry = PendingSave(
            row_index=row,
            col_index=col,
            column_name=column_name,
            old_value=old_value,
            new_value=new_value,
            primary_key_value=pk_value,
            seq=self._next_save_seq,
        )
        self._next_save_seq += 1
        if self.ledger.record(entry):
            logger.debug(f"Save of {entry.key} supersedes an earlier one still in flight")
        self.cell_flags[position] = CellFlag(CellStatus.SAVING)

        self._dispatch(
            "saveCell",
            {
                "rowIndex": row,
                "colIndex": col,
                "columnName": column_name,
                "value": new_value,
                "oldValue": old_value,
                "pkColumn": pk_column,
                "pkValue": pk_value,
                "seq": entry.seq,
            },
        )
        return True

    # Staged rows

    def _insertable(self, column: ColumnInfo) -> bool:
        return not column.read_only and column.name != self.primary_key_column

    def _stage(self, values: Dict[str, Any]) -> int:
        if self.editing:
            self.commit_edit()
        staged = StagedRow(row_id=self._next_row_id, values=values)
        self._next_row_id += 1
        self.staged.append(staged)
        row = self.row_count - 1

        for col, column in enumerate(self.columns):
            if (
                self._insertable(column)
                and ColumnKind.for_type(column.data_type) is not ColumnKind.BOOLEAN
            ):
                self.begin_edit(row, col)
                break
        else:
            if self.columns:
                self.selected = CellPosition(row, 0)
        return row

    def add_row(self) -> int:
        """Append an empty staged row and start editing its first cell."""
        if self.schema is None:
            raise RuntimeError("No table loaded")
        return self._stage({column.name: None for column in self.columns})

    def duplicate_row(self, row: int) -> int:
        """Stage a copy of a row; key and read-only columns are left empty."""
        if self.schema is None:
            raise RuntimeError("No table loaded")
        if not 0 <= row < self.row_count:
            raise IndexError(f"row {row} out of range")
        source = self.row_values(row)
        return self._stage(
            {
                column.name: source.get(column.name) if self._insertable(column) else None
                for column in self.columns
            }
        )

    def discard_row(self, row: int) -> bool:
        """Drop a staged row. Nothing is sent."""
        if not self.is_staged(row) or row >= self.row_count:
            return False
        if self.editing and self.editing.position.row >= len(self.rows):
            self.editing = None
        del self.staged[row - len(self.rows)]
        self._forget_staged_positions()
        return True

    def save_row(self, row: int) -> bool:
        """Send a staged row as an INSERT."""
        if not self.is_staged(row) or row >= self.row_count:
            return False
        staged = self.staged[row - len(self.rows)]
        if staged.saving:
            return False
        if self.editing and self.editing.position.row == row:
            self.commit_edit()

        columns = [column.name for column in self.columns if self._insertable(column)]
        staged.saving = True
        staged.error = None
        self._dispatch(
            "insertRow",
            {
                "columns": columns,
                "values": [staged.values.get(name) for name in columns],
                "newRowIndex": row,
                "rowId": staged.row_id,
            },
        )
        return True

    def _forget_staged_positions(self) -> None:
        """Staged positions shift when a staged row goes away."""
        first_staged = len(self.rows)
        if self.selected and self.selected.row >= first_staged:
            self.selected = None
        if self.selected_row is not None and self.selected_row >= first_staged:
            self.selected_row = None
        self.cell_flags = {
            position: flag
            for position, flag in self.cell_flags.items()
            if position.row < first_staged
        }

    # Deletion

    def request_delete(self) -> bool:
        """Ask for confirmation to delete the selected row."""
        if not self.can_delete:
            return False
        self.pending_delete = self.selected_row
        return True

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        row = self.pending_delete
        self.pending_delete = None
        if row is None or self.delete_in_progress or row >= len(self.rows):
            return False
        pk_column = self.primary_key_column
        if pk_column is None:
            return False

        pk_value = self.rows[row].get(pk_column)
        self.delete_in_progress = True
        self._deleting_key = pk_value
        self._dispatch(
            "deleteRow",
            {"primaryKeyColumn": pk_column, "primaryKeyValue": pk_value, "rowIndex": row},
        )
        return True

    # Notifications

    def notify(
        self, message: str, code: Optional[str] = None, context: Optional[str] = None
    ) -> Notification:
        notification = Notification(self._next_notification_id, message, code, context)
        self._next_notification_id += 1
        self.notifications.append(notification)
        return notification

    def dismiss(self, notification_id: int) -> bool:
        for index, notification in enumerate(self.notifications):
            if notification.id == notification_id:
                del self.notifications[index]
                return True
        return False

    # Events

    def handle_event(self, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        handler = self._event_handlers.get(event)
        if handler is None:
            logger.debug(f"Ignoring event {event!r}")
            return
        handler(payload or {})

    def _on_namespace_list(self, payload: Dict[str, Any]) -> None:
        self.namespaces = list(payload.get("namespaces") or [])

    def _on_table_list(self, payload: Dict[str, Any]) -> None:
        self.tables = list(payload.get("tables") or [])

    def _on_table_schema(self, payload: Dict[str, Any]) -> None:
        schema = TableSchema.model_validate(payload)
        if self.schema is None or (schema.namespace, schema.table_name) != (
            self.schema.namespace,
            self.schema.table_name,
        ):
            # Another table: nothing carries over
            self.editing = None
            self.rows = []
            self.staged = []
            self.total_rows = 0
            self.page = 0
            self.filters = {}
            self.sort = SortState()
            self.ledger.clear()
            self.cell_flags = {}
            self.selected = None
            self.selected_row = None
            self.pending_delete = None
        self.schema = schema
        logger.debug(f"Schema for {schema.table_name}: {len(schema.columns)} columns")

    def _on_table_data(self, payload: Dict[str, Any]) -> None:
        table_name = payload.get("tableName")
        if table_name is not None and (
            self.schema is None
            or (payload.get("namespace"), table_name)
            != (self.schema.namespace, self.schema.table_name)
        ):
            # Rows of another table: their keys mean nothing under this schema
            logger.debug(f"Dropping rows of {table_name} that arrived after a table switch")
            return

        if self.editing:
            self.commit_edit()

        self.rows = [dict(row) for row in payload.get("rows") or []]
        self.total_rows = int(payload.get("totalRows") or 0)
        self.page = int(payload.get("page") or 0)
        self.page_size = int(payload.get("pageSize") or self.page_size)
        self.pagination_loading = False

        self.selected = None
        self.selected_row = None
        self.pending_delete = None
        self.cell_flags = {}
        self._overlay_pending()
        logger.debug(f"Page {self.page}: {len(self.rows)} of {self.total_rows} rows")

    def _overlay_pending(self) -> None:
        """Show in-flight values over freshly loaded rows with the same key."""
        pk_column = self.primary_key_column
        if pk_column is None or not len(self.ledger):
            return
        for index, row in enumerate(self.rows):
            for column_name, entry in self.ledger.for_row(row.get(pk_column)).items():
                col = self.schema.column_index(column_name)
                if col is None:
                    continue
                row[column_name] = entry.new_value
                entry.row_index, entry.col_index = index, col
                self.cell_flags[CellPosition(index, col)] = CellFlag(CellStatus.SAVING)

    def _on_table_loading(self, payload: Dict[str, Any]) -> None:
        self.loading = bool(payload.get("loading"))

    def _locate(self, row_hint: int, pk_value: Any, column_name: str) -> Optional[CellPosition]:
        """Find a cell by primary key, trying the original row index first."""
        pk_column = self.primary_key_column
        col = self.schema.column_index(column_name) if self.schema else None
        if pk_column is None or col is None:
            return None
        if 0 <= row_hint < len(self.rows) and _same_value(self.rows[row_hint].get(pk_column), pk_value):
            return CellPosition(row_hint, col)
        for index, row in enumerate(self.rows):
            if _same_value(row.get(pk_column), pk_value):
                return CellPosition(index, col)
        return None

    def _on_save_cell_result(self, payload: Dict[str, Any]) -> None:
        pk_value = payload.get("primaryKeyValue")
        column_name = payload.get("columnName")
        entry = self.ledger.get(pk_value, column_name)
        if entry is None:
            logger.debug(f"No pending save for {pk_value}:{column_name}")
            return
        seq = payload.get("seq")
        if seq is not None:
            superseded = entry.seq != seq
        else:
            superseded = not _same_value(entry.new_value, payload.get("newValue"))
        if superseded:
            # A newer save for this cell is in flight; it decides the outcome
            logger.debug(f"Ignoring superseded save result for {entry.key}")
            return
        self.ledger.pop(pk_value, column_name)

        error = payload.get("error") or {}
        message = error.get("message") or "Save failed"
        position = self._locate(entry.row_index, pk_value, column_name)
        if position is None:
            if payload.get("success"):
                logger.debug(f"Save of {entry.key} confirmed for a row no longer on screen")
            else:
                logger.warning(f"Save of {entry.key} failed for a row no longer on screen: {message}")
            return

        if payload.get("success"):
            self.cell_flags[position] = CellFlag(CellStatus.SAVED)
            return

        self._set_value(position.row, position.col, entry.old_value)
        self.cell_flags[position] = CellFlag(CellStatus.ERROR, message)
        self.notify(message, error.get("code"), "saveCell")

    def _on_insert_row_result(self, payload: Dict[str, Any]) -> None:
        staged_index = None
        row_id = payload.get("rowId")
        for index, staged in enumerate(self.staged):
            if staged.row_id == row_id:
                staged_index = index
                break
        if staged_index is None and row_id is None:
            new_row_index = payload.get("newRowIndex")
            if new_row_index is not None and 0 <= new_row_index - len(self.rows) < len(self.staged):
                staged_index = new_row_index - len(self.rows)
        if staged_index is None:
            logger.debug(f"Insert result for unknown staged row {row_id}")
            return

        staged = self.staged[staged_index]
        staged.saving = False
        if payload.get("success"):
            if self.editing and self.editing.position.row == len(self.rows) + staged_index:
                self.editing = None
            del self.staged[staged_index]
            self._forget_staged_positions()
            # The server assigned the key; reload to show it
            self.refresh()
            return

        error = payload.get("error") or {}
        staged.error = error.get("message") or "Insert failed"
        self.notify(staged.error, error.get("code"), "insertRow")

    def _on_delete_row_result(self, payload: Dict[str, Any]) -> None:
        pk_value = self._deleting_key
        self.delete_in_progress = False
        self._deleting_key = None

        if not payload.get("success"):
            error = payload.get("error") or {}
            self.notify(error.get("message") or "Delete failed", error.get("code"), "deleteRow")
            return

        pk_column = self.primary_key_column
        for index, row in enumerate(self.rows):
            if pk_column and _same_value(row.get(pk_column), pk_value):
                del self.rows[index]
                self.total_rows = max(0, self.total_rows - 1)
                break
        self.selected = None
        self.selected_row = None
        self.cell_flags = {}
        self.refresh()

    def _on_error(self, payload: Dict[str, Any]) -> None:
        # The current page stays on screen
        self.loading = False
        self.pagination_loading = False
        if payload.get("code") == ErrorCode.CONNECTION_CANCELLED.value:
            logger.debug(f"{payload.get('context')}: cancelled")
            return
        self.notify(
            payload.get("message") or "Unexpected error",
            payload.get("code"),
            payload.get("context"),
        )
