from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from ..models.column_definition import (
    ColumnDefinition,
    ConfigurationError,
    SpecialColumnKind,
    arrange_columns,
    validate_column_definitions,
)
from ..models.config_models import DEFAULT_MINIMUM_ROW_COUNT, DEFAULT_TIMEOUT_SECONDS, GridConfig
from ..models.processing_result import BatchValidationResult, OperationProgress
from ..models.row import CellUIState, DataRow
from ..models.validation import ValidationConfig
from .validation_engine import CancellationSignal, ValidationEngine

"""Table engine: row store ownership and intelligent row management.

Invariants after every mutating operation:
1. row_count >= minimum_row_count + 1
2. a row that becomes non-empty while being the last row gets a new empty row
   appended after it (auto-expand)
3. columns are arranged [CHECKBOX?] + user columns + [VALIDATION_ALERTS?] + [DELETE_ROW?]
4. every row's row_index equals its position

The engine is single-writer: callers serialize mutating operations themselves.
Import and export take a cooperative timeout checked between rows; a timeout keeps
the rows already applied (no rollback).
"""

__all__ = [
    "NotInitializedError",
    "TableEngine",
]

logger = logging.getLogger(__name__)

ColumnRef = int | str
ProgressCallback = Callable[[OperationProgress], None]


class NotInitializedError(RuntimeError):
    """Raised when a table operation runs before initialize() succeeded."""


class TableEngine:
    """Headless table: columns, rows and the operations a presentation layer calls.

    Cells are addressed by row index and by column index or column name. The
    column name -> slot mapping is built once in initialize().
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._rows: list[DataRow] = []
        self._columns: list[ColumnDefinition] = []
        self._slots: dict[str, int] = {}
        self._minimum_row_count = DEFAULT_MINIMUM_ROW_COUNT
        self._validator = ValidationEngine()
        self._last_batch_result: BatchValidationResult | None = None
        self._initialized = False

    @classmethod
    def from_config(cls, config: GridConfig, clock: Callable[[], float] = time.monotonic) -> TableEngine:
        engine = cls(clock=clock)
        engine.initialize(config.columns, config.validation, config.minimum_row_count)
        return engine

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------
    def initialize(
        self,
        columns: Sequence[ColumnDefinition],
        validation_config: ValidationConfig | None = None,
        minimum_row_count: int = DEFAULT_MINIMUM_ROW_COUNT,
    ) -> None:
        """Set up columns and create ``minimum_row_count + 1`` empty rows.

        Raises:
            ConfigurationError: invalid column list or negative minimum row count.
                The table stays uninitialized.
        """
        self._initialized = False
        try:
            if minimum_row_count < 0:
                raise ConfigurationError(f"minimum_row_count must be >= 0 (got {minimum_row_count})")
            validate_column_definitions(columns)
        except ConfigurationError as e:
            logger.error(f"initialize: {e}")
            raise

        self._columns = arrange_columns(columns)
        self._slots = {c.name: i for i, c in enumerate(self._columns)}
        self._minimum_row_count = minimum_row_count
        self._validator = ValidationEngine(validation_config)
        self._rows = [self._new_row(i) for i in range(minimum_row_count + 1)]
        self._last_batch_result = None
        self._initialized = True
        logger.info(
            f"initialize: columns={len(self._columns)} rows={len(self._rows)} "
            f"validation={'on' if self._validator.is_enabled else 'off'}"
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def minimum_row_count(self) -> int:
        return self._minimum_row_count

    @property
    def columns(self) -> list[ColumnDefinition]:
        return list(self._columns)

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self._columns]

    @property
    def validation_config(self) -> ValidationConfig | None:
        return self._validator.config

    @property
    def has_data(self) -> bool:
        return any(not r.is_empty for r in self._rows)

    @property
    def data_row_count(self) -> int:
        return sum(1 for r in self._rows if not r.is_empty)

    @property
    def smart_deletable_row_count(self) -> int:
        """Rows that smart delete can still remove before it starts clearing instead."""
        if not self._initialized:
            return 0
        return max(0, len(self._rows) - (self._minimum_row_count + 1))

    @property
    def last_batch_result(self) -> BatchValidationResult | None:
        """Result of the most recent batch validation, None before the first one."""
        return self._last_batch_result

    def get_column_definition(self, column: ColumnRef) -> ColumnDefinition:
        self._require_initialized()
        return self._columns[self._slot(column)]

    def column_index(self, name: str) -> int:
        self._require_initialized()
        return self._slot(name)

    # ------------------------------------------------------------------
    # Cell / row access
    # ------------------------------------------------------------------
    def get_cell(self, row: int, column: ColumnRef) -> Any:
        self._require_initialized()
        self._check_row(row)
        return self._rows[row].get(self._slot(column))

    def set_cell(self, row: int, column: ColumnRef, value: Any) -> None:
        """Write one cell; auto-expands when the last row becomes non-empty."""
        self._require_initialized()
        self._check_row(row)
        slot = self._slot(column)
        target = self._rows[row]
        old = target.get(slot)
        target.set(slot, value)
        logger.debug(f"set_cell: row={row} column={self._columns[slot].name} old={old!r} new={value!r}")
        self._after_write(target, [slot])

    def get_row(self, row: int) -> dict[str, Any]:
        self._require_initialized()
        self._check_row(row)
        target = self._rows[row]
        return {c.name: target.get(i) for i, c in enumerate(self._columns)}

    def set_row(self, row: int, data: Mapping[str, Any]) -> None:
        """Merge ``data`` into the row; keys that are not column names are ignored."""
        self._require_initialized()
        self._check_row(row)
        target = self._rows[row]
        written: list[int] = []
        for name, value in data.items():
            slot = self._slots.get(name)
            if slot is None:
                logger.debug(f"set_row: row={row} ignoring unknown column {name!r}")
                continue
            target.set(slot, value)
            written.append(slot)
        self._after_write(target, written)

    def get_cell_state(self, row: int, column: ColumnRef) -> CellUIState:
        self._require_initialized()
        self._check_row(row)
        return self._rows[row].get_state(self._slot(column))

    def get_row_error(self, row: int) -> str | None:
        self._require_initialized()
        self._check_row(row)
        return self._rows[row].row_error

    def is_row_empty(self, row: int) -> bool:
        self._require_initialized()
        self._check_row(row)
        return self._rows[row].is_empty

    def last_data_row_index(self) -> int:
        """Index of the last non-empty row, -1 when every row is empty."""
        self._require_initialized()
        for i in range(len(self._rows) - 1, -1, -1):
            if not self._rows[i].is_empty:
                return i
        return -1

    # ------------------------------------------------------------------
    # Intelligent row management
    # ------------------------------------------------------------------
    def can_delete_row(self, row: int) -> bool:
        if not self._initialized or row < 0 or row >= len(self._rows):
            return False
        return len(self._rows) > self._minimum_row_count + 1

    def smart_delete_row(self, row: int) -> None:
        """Remove the row when above the floor, otherwise clear its content."""
        self._require_initialized()
        self._check_row(row)
        if len(self._rows) > self._minimum_row_count + 1:
            self._delete_complete_row(row)
            logger.info(f"smart_delete: row={row} removed rows={len(self._rows)}")
        else:
            self._rows[row].clear()
            logger.info(f"smart_delete: row={row} cleared rows={len(self._rows)}")

    def smart_delete_rows(self, rows: Iterable[int]) -> None:
        """Smart delete several rows (highest index first), compacting afterwards.

        Every index is checked before anything is deleted.
        """
        self._require_initialized()
        ordered = sorted(set(rows), reverse=True)
        for row in ordered:
            self._check_row(row)
        for row in ordered:
            self.smart_delete_row(row)
        if len(ordered) > 1:
            self.compact()

    def smart_delete_rows_where(self, predicate: Callable[[dict[str, Any]], bool]) -> int:
        """Smart delete every non-empty row whose column name -> value map matches.

        Returns:
            Number of rows the predicate matched
        """
        self._require_initialized()
        matched = [r.row_index for r in self._rows if not r.is_empty and predicate(self.get_row(r.row_index))]
        logger.info(f"smart_delete_where: matched={len(matched)} rows={len(self._rows)}")
        if matched:
            self.smart_delete_rows(matched)
        return len(matched)

    def clear_all_data(self) -> None:
        """Drop every row and start over with ``minimum_row_count + 1`` empty rows."""
        self._require_initialized()
        cleared = self.data_row_count
        self._rows = [self._new_row(i) for i in range(self._minimum_row_count + 1)]
        self._last_batch_result = None
        logger.info(f"clear_all: data_rows={cleared} rows={len(self._rows)}")

    def set_minimum_row_count(self, minimum_row_count: int) -> None:
        """Change the row floor, appending empty rows when the table is below it.

        Lowering the floor never removes rows.

        Raises:
            ConfigurationError: negative count
        """
        self._require_initialized()
        if minimum_row_count < 0:
            raise ConfigurationError(f"minimum_row_count must be >= 0 (got {minimum_row_count})")
        self._minimum_row_count = minimum_row_count
        self._ensure_minimum_rows()
        logger.info(f"minimum_row_count: set to {minimum_row_count} rows={len(self._rows)}")

    def force_delete_row(self, row: int) -> None:
        """Remove the row regardless of the floor, then top up to the floor."""
        self._require_initialized()
        self._check_row(row)
        self._delete_complete_row(row)
        logger.info(f"force_delete: row={row} rows={len(self._rows)}")

    def insert_row(self, row: int, data: Mapping[str, Any] | None = None) -> None:
        """Insert a new row at ``row`` (0..row_count) shifting later rows down."""
        self._require_initialized()
        if row < 0 or row > len(self._rows):
            raise IndexError(f"insert position {row} out of range [0, {len(self._rows)}]")
        self._rows.insert(row, self._new_row(row))
        self._reindex(row + 1)
        if data:
            self.set_row(row, data)

    def paste(
        self,
        data_rows: Sequence[Mapping[str, Any] | Sequence[Any]],
        start_row: int,
        start_column: int = 0,
    ) -> None:
        """Write a block of rows starting at ``start_row``, growing the table as needed.

        Mapping rows are written by column name. Sequence rows (clipboard cells) are
        mapped positionally starting at ``start_column``; cells past the last column
        are dropped.
        """
        self._require_initialized()
        self._check_row(start_row)
        if start_column < 0 or start_column >= len(self._columns):
            raise IndexError(f"column index {start_column} out of range [0, {len(self._columns)})")

        self._reserve_rows(start_row, len(data_rows))
        for offset, item in enumerate(data_rows):
            self.set_row(start_row + offset, self._as_mapping(item, start_column))
        logger.info(f"paste: start_row={start_row} rows={len(data_rows)} total_rows={len(self._rows)}")

    def compact(self) -> None:
        """Drop empty rows, keep data rows in order, then top up to the floor."""
        self._require_initialized()
        data_rows = [r for r in self._rows if not r.is_empty]
        self._rows = data_rows
        self._reindex(0)
        self._ensure_minimum_rows()
        logger.info(f"compact: data_rows={len(data_rows)} rows={len(self._rows)}")

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------
    def import_rows(
        self,
        data_rows: Sequence[Mapping[str, Any]],
        start_row: int | None = None,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
        insert_mode: bool = False,
        progress: ProgressCallback | None = None,
    ) -> int:
        """Import row maps starting at ``start_row`` (default 0).

        Overwrites existing rows unless ``insert_mode`` is set, in which case the
        imported rows are inserted before the row at ``start_row``. Runs batch
        validation afterwards when the validation config asks for it.

        Returns:
            Number of rows imported

        Raises:
            TimeoutError: ``timeout`` seconds elapsed; rows already written stay.
        """
        self._require_initialized()
        target = start_row if start_row is not None else 0
        limit = len(self._rows) if insert_mode else None
        if target < 0 or (limit is not None and target > limit):
            raise IndexError(f"start row {target} out of range")

        logger.info(f"import: start rows={len(data_rows)} start_row={target} insert_mode={insert_mode}")
        started = self._clock()
        if not insert_mode:
            self._reserve_rows(target, len(data_rows))

        total = len(data_rows)
        for i, data in enumerate(data_rows):
            self._check_deadline("import", started, timeout, done=i)
            if insert_mode:
                self.insert_row(target + i, data)
            else:
                self.set_row(target + i, data)
            if progress is not None:
                progress(OperationProgress(i + 1, total, "Importing data"))

        config = self._validator.config
        if config is not None and config.enable_batch_validation:
            self.validate_batch()

        logger.info(f"import: done rows={total} total_rows={len(self._rows)}")
        return total

    def export_rows(
        self,
        include_validation_alerts: bool = False,
        remove_after: bool = False,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
        progress: ProgressCallback | None = None,
    ) -> list[dict[str, Any]]:
        """Export every non-empty row as a column name -> value map.

        Checkbox and delete-row columns are never exported. The validation-alerts
        column is exported only on request; its value is the row's current error
        messages joined by "; ".

        With ``remove_after`` the exported rows are smart-deleted (highest index
        first) once the whole export has been built.

        Raises:
            TimeoutError: ``timeout`` seconds elapsed; nothing is removed.
        """
        self._require_initialized()
        export_slots = [
            (i, c)
            for i, c in enumerate(self._columns)
            if c.special_kind not in (SpecialColumnKind.CHECKBOX, SpecialColumnKind.DELETE_ROW)
            and (c.special_kind is not SpecialColumnKind.VALIDATION_ALERTS or include_validation_alerts)
        ]

        logger.info(
            f"export: start rows={len(self._rows)} include_alerts={include_validation_alerts} "
            f"remove_after={remove_after}"
        )
        started = self._clock()
        result: list[dict[str, Any]] = []
        total = len(self._rows)
        for i, row in enumerate(self._rows):
            self._check_deadline("export", started, timeout, done=len(result))
            if not row.is_empty:
                item: dict[str, Any] = {}
                for slot, column in export_slots:
                    if column.special_kind is SpecialColumnKind.VALIDATION_ALERTS:
                        item[column.name] = "; ".join(row.error_messages()) or None
                    else:
                        item[column.name] = row.get(slot)
                result.append(item)
            if progress is not None:
                progress(OperationProgress(i + 1, total, "Exporting data"))

        if remove_after and result:
            exported = [r.row_index for r in self._rows if not r.is_empty]
            for row_index in sorted(exported, reverse=True):
                self.smart_delete_row(row_index)

        logger.info(f"export: done rows={len(result)} remove_after={remove_after}")
        return result

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate_dataset(self) -> bool:
        """True when every non-empty row passes all rules (or validation is off)."""
        self._require_initialized()
        return self._validator.are_all_non_empty_rows_valid(self._rows, self._columns)

    def validate_batch(self, cancel_event: CancellationSignal | None = None) -> BatchValidationResult:
        self._require_initialized()
        result = self._validator.validate_all_rows_batch(self._rows, self._columns, cancel_event)
        self._last_batch_result = result
        return result

    def validate_cell(self, row: int, column: ColumnRef) -> bool:
        self._require_initialized()
        self._check_row(row)
        slot = self._slot(column)
        return self._validator.validate_cell(self._rows[row], slot, self._columns[slot])

    def valid_row_count(self) -> int:
        """Non-empty rows whose current cell and row state is valid."""
        self._require_initialized()
        return sum(1 for r in self._rows if not r.is_empty and not r.error_messages())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError("table engine must be initialized first")

    def _check_row(self, row: int) -> None:
        if row < 0 or row >= len(self._rows):
            raise IndexError(f"row index {row} out of range [0, {len(self._rows)})")

    def _slot(self, column: ColumnRef) -> int:
        if isinstance(column, str):
            slot = self._slots.get(column)
            if slot is None:
                raise IndexError(f"column {column!r} not found")
            return slot
        if column < 0 or column >= len(self._columns):
            raise IndexError(f"column index {column} out of range [0, {len(self._columns)})")
        return column

    def _new_row(self, row_index: int) -> DataRow:
        return DataRow(row_index, len(self._columns))

    def _reindex(self, start: int) -> None:
        for i in range(start, len(self._rows)):
            self._rows[i].row_index = i

    def _expand_to(self, count: int) -> None:
        while len(self._rows) < count:
            self._rows.append(self._new_row(len(self._rows)))

    def _ensure_minimum_rows(self) -> None:
        self._expand_to(self._minimum_row_count + 1)

    def _reserve_rows(self, start_row: int, count: int) -> None:
        # Keep one trailing empty row after the written block
        required = start_row + count
        if required > len(self._rows) - 1:
            self._expand_to(required + 1)

    def _delete_complete_row(self, row: int) -> None:
        del self._rows[row]
        self._reindex(row)
        self._ensure_minimum_rows()

    def _after_write(self, row: DataRow, slots: list[int]) -> None:
        config = self._validator.config
        if config is not None and config.enable_realtime_validation:
            for slot in slots:
                self._validator.validate_cell(row, slot, self._columns[slot])
        if row.row_index == len(self._rows) - 1 and not row.is_empty:
            self._rows.append(self._new_row(len(self._rows)))
            logger.debug(f"auto-expand: rows={len(self._rows)}")

    def _as_mapping(self, item: Mapping[str, Any] | Sequence[Any], start_column: int) -> Mapping[str, Any]:
        if isinstance(item, Mapping):
            return item
        cells = [item] if isinstance(item, str) else list(item)
        available = len(self._columns) - start_column
        if len(cells) > available:
            logger.debug(f"paste: dropping {len(cells) - available} cells past the last column")
        return {self._columns[start_column + j].name: v for j, v in enumerate(cells[:available])}

    def _check_deadline(self, operation: str, started: float, timeout: float | None, done: int) -> None:
        if timeout is None:
            return
        if self._clock() - started > timeout:
            logger.error(f"{operation}: timeout after {timeout}s rows_done={done}")
            raise TimeoutError(f"{operation} exceeded timeout of {timeout}s after {done} rows")
