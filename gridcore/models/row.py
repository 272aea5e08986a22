from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""Row store models.

A DataRow is a fixed-width record with one slot per table column. Slots are
addressed by position only; the column name -> slot index mapping belongs to the
table, so rows never carry column metadata.
"""

__all__ = [
    "CellUIState",
    "DataRow",
    "is_empty_value",
]


def is_empty_value(value: Any) -> bool:
    """A cell value counts as empty when it is None or an empty string."""
    return value is None or (isinstance(value, str) and value == "")


@dataclass(frozen=True)
class CellUIState:
    """Validation state shown for one cell.

    Immutable: the validation engine replaces the state object in the slot instead
    of mutating a shared instance.
    """
    is_valid: bool = True
    error_message: str | None = None

    @staticmethod
    def invalid(message: str) -> CellUIState:
        return CellUIState(is_valid=False, error_message=message)


VALID_STATE = CellUIState()


class DataRow:
    """One row of the row store.

    Attributes:
        row_index: Position of the row in the store, kept in sync by the table
        row_error: Cross-row validation message for the whole row (None if none)
    """

    __slots__ = ("row_index", "row_error", "_values", "_states")

    def __init__(self, row_index: int, width: int) -> None:
        self.row_index = row_index
        self.row_error: str | None = None
        self._values: list[Any] = [None] * width
        self._states: list[CellUIState] = [VALID_STATE] * width

    @property
    def width(self) -> int:
        return len(self._values)

    @property
    def values(self) -> tuple[Any, ...]:
        return tuple(self._values)

    @property
    def is_empty(self) -> bool:
        return all(is_empty_value(v) for v in self._values)

    def get(self, slot: int) -> Any:
        return self._values[slot]

    def set(self, slot: int, value: Any) -> None:
        self._values[slot] = value

    def get_state(self, slot: int) -> CellUIState:
        return self._states[slot]

    def set_state(self, slot: int, state: CellUIState) -> None:
        self._states[slot] = state

    def reset_states(self) -> None:
        self._states = [VALID_STATE] * len(self._values)
        self.row_error = None

    def error_messages(self) -> list[str]:
        """Current cell error messages in slot order, followed by the row error."""
        messages = [s.error_message for s in self._states if not s.is_valid and s.error_message]
        if self.row_error:
            messages.append(self.row_error)
        return messages

    def clear(self) -> None:
        """Clear all values and validation state; the row itself survives."""
        self._values = [None] * len(self._values)
        self.reset_states()

    def __repr__(self) -> str:  # pragma: no cover (debug aid)
        return f"DataRow(row_index={self.row_index}, values={self._values!r})"
