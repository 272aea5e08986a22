from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

"""Column definition model and special column arrangement.

A ColumnDefinition is the static description of one grid column. Definitions are
validated and arranged once when a table is initialized; the arranged order is
fixed for the rest of the session:

    [CHECKBOX?] + [user columns in input order] + [VALIDATION_ALERTS?] + [DELETE_ROW?]
"""

__all__ = [
    "ConfigurationError",
    "SpecialColumnKind",
    "ColumnDefinition",
    "validate_column_definitions",
    "arrange_columns",
]


class ConfigurationError(Exception):
    """Raised for invalid column setup or invalid viewport configuration."""


class SpecialColumnKind(Enum):
    """Reserved structural role of a column.

    - CHECKBOX: row selection checkbox, always first
    - VALIDATION_ALERTS: per-row validation messages, after the user columns
    - DELETE_ROW: delete-row trigger, always last
    """
    CHECKBOX = "checkbox"
    VALIDATION_ALERTS = "validation_alerts"
    DELETE_ROW = "delete_row"


@dataclass(frozen=True)
class ColumnDefinition:
    """Immutable description of a single grid column.

    ``name`` is the case-sensitive key used for row data maps; ``display_name``
    falls back to ``name`` when not given.
    """
    name: str
    display_name: str | None = None
    value_type: type = object  # Expected Python type of cell values (object = any)
    is_read_only: bool = False
    min_width: float | None = None
    max_width: float | None = None
    is_sortable: bool = True
    is_filterable: bool = True
    special_kind: SpecialColumnKind | None = None

    @property
    def header(self) -> str:
        return self.display_name or self.name

    @property
    def is_special(self) -> bool:
        return self.special_kind is not None

    def validation_error(self) -> str | None:
        """Return the reason this definition is invalid, or None when it is valid."""
        if not isinstance(self.name, str) or not self.name.strip():
            return "name must be a non-empty string"
        for label, width in (("min_width", self.min_width), ("max_width", self.max_width)):
            if width is not None and width < 0:
                return f"{label} must be >= 0 (got {width})"
        if (
            self.min_width is not None
            and self.max_width is not None
            and self.min_width > self.max_width
        ):
            return f"min_width {self.min_width} is greater than max_width {self.max_width}"
        return None


def validate_column_definitions(columns: Sequence[ColumnDefinition]) -> None:
    """Validate a caller-supplied column list.

    Raises:
        ConfigurationError: naming the offending column and the reason when the list
            is empty, a definition is invalid, a name is duplicated, or a special
            kind appears more than once.
    """
    if not columns:
        raise ConfigurationError("at least one column definition is required")

    seen_names: set[str] = set()
    seen_kinds: dict[SpecialColumnKind, str] = {}
    for column in columns:
        reason = column.validation_error()
        if reason is not None:
            raise ConfigurationError(f"invalid column definition '{column.name}': {reason}")
        if column.name in seen_names:
            raise ConfigurationError(f"invalid column definition '{column.name}': duplicate name")
        seen_names.add(column.name)
        if column.special_kind is not None:
            if column.special_kind in seen_kinds:
                raise ConfigurationError(
                    f"invalid column definition '{column.name}': special kind "
                    f"'{column.special_kind.value}' already used by '{seen_kinds[column.special_kind]}'"
                )
            seen_kinds[column.special_kind] = column.name


def arrange_columns(columns: Sequence[ColumnDefinition]) -> list[ColumnDefinition]:
    """Return columns in the fixed special-column order (input must be validated)."""
    by_kind = {c.special_kind: c for c in columns if c.special_kind is not None}
    arranged: list[ColumnDefinition] = []
    if SpecialColumnKind.CHECKBOX in by_kind:
        arranged.append(by_kind[SpecialColumnKind.CHECKBOX])
    arranged.extend(c for c in columns if c.special_kind is None)
    if SpecialColumnKind.VALIDATION_ALERTS in by_kind:
        arranged.append(by_kind[SpecialColumnKind.VALIDATION_ALERTS])
    if SpecialColumnKind.DELETE_ROW in by_kind:
        arranged.append(by_kind[SpecialColumnKind.DELETE_ROW])
    return arranged
