from __future__ import annotations

from dataclasses import dataclass, field

from .error_record import CELL_RULE, CROSS_ROW, ValidationIssueRecord

"""Result models for table operations.

- BatchValidationResult: aggregate built fresh by every batch validation call
- OperationProgress: progress snapshot reported by import / export
"""

__all__ = [
    "BatchValidationResult",
    "OperationProgress",
]


@dataclass
class BatchValidationResult:
    """Aggregated outcome of a full-dataset validation pass.

    Attributes:
        valid_cells_count: Cells whose rules all passed
        cell_errors: (row_index, column_name) -> error messages
        row_errors: row_index -> cross-row error message
        global_errors: cross-row failures not tied to specific rows
        processed_rows: Non-empty rows evaluated before completion or cancellation
        cancelled: True when the pass stopped early on a cancellation signal
    """
    valid_cells_count: int = 0
    cell_errors: dict[tuple[int, str], list[str]] = field(default_factory=dict)
    row_errors: dict[int, str] = field(default_factory=dict)
    global_errors: list[str] = field(default_factory=list)
    processed_rows: int = 0
    cancelled: bool = False

    @property
    def invalid_cells_count(self) -> int:
        return sum(len(messages) for messages in self.cell_errors.values())

    @property
    def has_errors(self) -> bool:
        return self.invalid_cells_count > 0 or bool(self.row_errors) or bool(self.global_errors)

    @property
    def cross_row_error_count(self) -> int:
        return len(self.row_errors) + len(self.global_errors)

    def add_error(self, row_index: int, column_name: str, message: str) -> None:
        self.cell_errors.setdefault((row_index, column_name), []).append(message)

    def add_row_error(self, row_index: int, message: str) -> None:
        # Several cross-row rules may flag the same row
        existing = self.row_errors.get(row_index)
        self.row_errors[row_index] = f"{existing}; {message}" if existing else message

    def errors_for_row(self, row_index: int) -> list[str]:
        messages = [
            m for (r, _), msgs in sorted(self.cell_errors.items()) if r == row_index for m in msgs
        ]
        if row_index in self.row_errors:
            messages.append(self.row_errors[row_index])
        return messages

    def to_records(self) -> list[ValidationIssueRecord]:
        """Flatten the result into log records (cell issues first, then cross-row)."""
        records = [
            ValidationIssueRecord.create(row, column, CELL_RULE, message)
            for (row, column), messages in sorted(self.cell_errors.items())
            for message in messages
        ]
        records.extend(
            ValidationIssueRecord.create(row, None, CROSS_ROW, message)
            for row, message in sorted(self.row_errors.items())
        )
        records.extend(
            ValidationIssueRecord.create(-1, None, CROSS_ROW, message) for message in self.global_errors
        )
        return records


@dataclass(frozen=True)
class OperationProgress:
    """Progress snapshot for row-level work (import / export)."""
    processed_items: int
    total_items: int
    current_operation: str

    @property
    def percent_complete(self) -> float:
        if self.total_items <= 0:
            return 0.0
        return self.processed_items / self.total_items * 100
