from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from ..models.column_definition import ColumnDefinition
from ..models.processing_result import BatchValidationResult
from ..models.row import CellUIState, DataRow
from ..models.validation import CrossRowResult, ValidationConfig, ValidationRule

"""Validation engine for gridcore.

Validation always covers the complete dataset (every non-empty row), never the
slice a viewport happens to show. Special columns are never validated.

Cell rules follow an eager-fail policy: rules of a column run first-to-last and
the first failing rule is the only error recorded for the cell. Cross-row rules
accumulate every failing row.

Entry points:
- are_all_non_empty_rows_valid: boolean, short-circuits, no report, no state change
- validate_all_rows_batch: exhaustive, updates each cell's CellUIState, returns
  a BatchValidationResult; honours a cancellation signal between rows
- validate_cell: single cell, used by continuous (realtime) mode
"""

__all__ = [
    "CancellationSignal",
    "RuleEvaluationError",
    "ValidationEngine",
]

logger = logging.getLogger(__name__)


class CancellationSignal(Protocol):
    """Anything with ``is_set()``, e.g. threading.Event."""

    def is_set(self) -> bool: ...


class RuleEvaluationError(Exception):
    """Raised when a rule's validator itself fails (a broken rule, not invalid data)."""

    def __init__(self, rule_name: str, row_index: int | None, column_name: str | None, cause: Exception):
        location = f"row={row_index} column={column_name}" if column_name else "cross-row"
        super().__init__(f"rule '{rule_name}' raised {type(cause).__name__} at {location}: {cause}")
        self.rule_name = rule_name
        self.row_index = row_index
        self.column_name = column_name


class ValidationEngine:
    """Evaluates a ValidationConfig over a table's rows.

    The engine is stateless apart from its configuration; rows and the arranged
    column list are passed in by the table for every call.
    """

    def __init__(self, config: ValidationConfig | None = None) -> None:
        self.config = config

    @property
    def is_enabled(self) -> bool:
        return self.config is not None and self.config.is_validation_enabled

    # ------------------------------------------------------------------
    # Rule evaluation helpers
    # ------------------------------------------------------------------
    def _first_failure(self, rules: list[ValidationRule], value: Any, row_index: int, column_name: str) -> ValidationRule | None:
        for rule in rules:
            try:
                ok = rule.check(value)
            except Exception as e:
                raise RuleEvaluationError(rule.name, row_index, column_name, e) from e
            if not ok:
                return rule
        return None

    @staticmethod
    def _row_snapshot(row: DataRow, columns: Sequence[ColumnDefinition]) -> dict[str, Any]:
        return {c.name: row.get(i) for i, c in enumerate(columns)}

    def _run_cross_row_rules(
        self, config: ValidationConfig, data_rows: list[DataRow], columns: Sequence[ColumnDefinition]
    ) -> list[tuple[str, CrossRowResult]]:
        snapshot = [self._row_snapshot(r, columns) for r in data_rows]
        outcomes: list[tuple[str, CrossRowResult]] = []
        for rule in config.enabled_cross_row_rules():
            try:
                result = rule.check(snapshot)
            except Exception as e:
                raise RuleEvaluationError(rule.name, None, None, e) from e
            outcomes.append((rule.name, result))
        return outcomes

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def are_all_non_empty_rows_valid(self, rows: Sequence[DataRow], columns: Sequence[ColumnDefinition]) -> bool:
        """Return False at the first failing cell or cross-row rule.

        Returns True without evaluating anything when validation is disabled.
        """
        config = self.config
        if config is None or not config.is_validation_enabled:
            return True

        data_rows = [r for r in rows if not r.is_empty]
        for row in data_rows:
            for slot, column in enumerate(columns):
                if column.is_special:
                    continue
                failed = self._first_failure(
                    config.rules_for(column.name), row.get(slot), row.row_index, column.name
                )
                if failed is not None:
                    logger.debug(
                        f"validation: cell failed row={row.row_index} column={column.name} "
                        f"error={failed.error_message}"
                    )
                    return False

        for rule_name, result in self._run_cross_row_rules(config, data_rows, columns):
            if not result.is_valid:
                logger.debug(f"validation: cross-row rule failed rule={rule_name}")
                return False
        return True

    def validate_all_rows_batch(
        self,
        rows: Sequence[DataRow],
        columns: Sequence[ColumnDefinition],
        cancel_event: CancellationSignal | None = None,
    ) -> BatchValidationResult:
        """Validate every non-empty row and update each cell's UI state in place.

        Empty rows have their stale state reset. On cancellation the rows already
        processed keep their new state, cross-row rules are skipped and the partial
        result is returned with ``cancelled=True``.

        Returns an empty result when validation is disabled.
        """
        result = BatchValidationResult()
        config = self.config
        if config is None or not config.is_validation_enabled:
            return result

        logger.info(f"validation: batch start rows={len(rows)}")
        data_rows: list[DataRow] = []
        for row in rows:
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                break
            row.reset_states()
            if row.is_empty:
                continue
            data_rows.append(row)
            for slot, column in enumerate(columns):
                if column.is_special:
                    continue
                failed = self._first_failure(
                    config.rules_for(column.name), row.get(slot), row.row_index, column.name
                )
                if failed is None:
                    result.valid_cells_count += 1
                    continue
                row.set_state(slot, CellUIState.invalid(failed.error_message))
                result.add_error(row.row_index, column.name, failed.error_message)
                logger.debug(
                    f"validation: cell failed row={row.row_index} column={column.name} "
                    f"rule={failed.name} value={row.get(slot)!r}"
                )
            result.processed_rows += 1

        if result.cancelled:
            logger.warning(f"validation: batch cancelled after rows={result.processed_rows}")
            return result

        for rule_name, outcome in self._run_cross_row_rules(config, data_rows, columns):
            if outcome.is_valid:
                continue
            if not outcome.row_errors:
                result.global_errors.append(outcome.global_error_message or f"{rule_name} failed")
            for position, message in outcome.row_errors.items():
                target = data_rows[position]
                result.add_row_error(target.row_index, message)
                target.row_error = result.row_errors[target.row_index]

        logger.info(
            f"validation: batch done valid={result.valid_cells_count} "
            f"invalid={result.invalid_cells_count} cross_row={result.cross_row_error_count}"
        )
        return result

    def validate_cell(self, row: DataRow, slot: int, column: ColumnDefinition) -> bool:
        """Validate one cell and replace its UI state. Special columns are always valid."""
        config = self.config
        if config is None or not config.is_validation_enabled or column.is_special:
            return True
        failed = self._first_failure(config.rules_for(column.name), row.get(slot), row.row_index, column.name)
        if failed is None:
            row.set_state(slot, CellUIState())
            return True
        row.set_state(slot, CellUIState.invalid(failed.error_message))
        return False
