from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

"""Validation rule models.

Two rule classes exist:

- ValidationRule: per-column predicate with an error message. Rules of one column
  are evaluated first-to-last and the first failing rule decides the cell error.
- CrossRowRule: receives a snapshot of all non-empty rows (list of column name ->
  value maps, in row order) and reports every failing row. Row errors are keyed by
  the position inside that snapshot; the engine maps them back to row indices.
"""

__all__ = [
    "ValidationRule",
    "CrossRowResult",
    "CrossRowRule",
    "ValidationConfig",
]

RowSnapshot = Sequence[Mapping[str, Any]]


@dataclass(frozen=True)
class ValidationRule:
    """A single cell-level rule.

    The validator returns True when the value is acceptable.
    """
    name: str
    validator: Callable[[Any], bool]
    error_message: str
    is_enabled: bool = True

    def check(self, value: Any) -> bool:
        return bool(self.validator(value))


@dataclass(frozen=True)
class CrossRowResult:
    """Outcome of one cross-row rule.

    Attributes:
        row_errors: snapshot position -> error message
        global_error_message: message for a failure not tied to specific rows
    """
    row_errors: dict[int, str] = field(default_factory=dict)
    global_error_message: str | None = None

    @property
    def is_valid(self) -> bool:
        return not self.row_errors and self.global_error_message is None

    @staticmethod
    def success() -> CrossRowResult:
        return CrossRowResult()

    @staticmethod
    def error(message: str, row_errors: dict[int, str] | None = None) -> CrossRowResult:
        return CrossRowResult(row_errors=dict(row_errors or {}), global_error_message=message)


@dataclass(frozen=True)
class CrossRowRule:
    """A rule evaluated over the full snapshot of non-empty rows."""
    name: str
    validator: Callable[[RowSnapshot], CrossRowResult]
    is_enabled: bool = True

    def check(self, rows: RowSnapshot) -> CrossRowResult:
        return self.validator(rows)


@dataclass
class ValidationConfig:
    """Validation setup handed to the table at initialization.

    Validation counts as enabled only when ``enabled`` is set and at least one
    rule is configured.

    - enable_batch_validation: run batch validation after every import
    - enable_realtime_validation: continuous mode, validate each edited cell
      synchronously inside set_cell / set_row
    """
    cell_rules: dict[str, list[ValidationRule]] = field(default_factory=dict)
    cross_row_rules: list[CrossRowRule] = field(default_factory=list)
    enabled: bool = True
    enable_batch_validation: bool = False
    enable_realtime_validation: bool = False

    @property
    def is_validation_enabled(self) -> bool:
        has_rules = any(self.cell_rules.values()) or bool(self.cross_row_rules)
        return self.enabled and has_rules

    def add_rule(self, column_name: str, rule: ValidationRule) -> ValidationConfig:
        self.cell_rules.setdefault(column_name, []).append(rule)
        return self

    def add_cross_row_rule(self, rule: CrossRowRule) -> ValidationConfig:
        self.cross_row_rules.append(rule)
        return self

    def rules_for(self, column_name: str) -> list[ValidationRule]:
        return [r for r in self.cell_rules.get(column_name, []) if r.is_enabled]

    def enabled_cross_row_rules(self) -> list[CrossRowRule]:
        return [r for r in self.cross_row_rules if r.is_enabled]
