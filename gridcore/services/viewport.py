from __future__ import annotations

import logging
from typing import Any, Protocol

from ..models.column_definition import ConfigurationError
from ..models.config_models import DEFAULT_VIEWPORT_SIZE, MAX_VIEWPORT_SIZE, ViewportConfig

"""Viewport window over a table.

The viewport holds no row data. It maps the table's row count onto a contiguous
index range ``[start_index, end_index]`` that a presentation layer renders; the
row count is re-read from the table before every computation, so any table
mutation is reflected on the next call.
"""

__all__ = [
    "RowSource",
    "ViewportWindow",
]

logger = logging.getLogger(__name__)


class RowSource(Protocol):
    """What the viewport needs from a table (TableEngine satisfies this)."""

    @property
    def row_count(self) -> int: ...

    def get_row(self, row: int) -> dict[str, Any]: ...


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class ViewportWindow:
    """Index-range mapper for virtual scrolling.

    Args:
        table: Row source whose ``row_count`` defines the dataset size
        size: Number of rows rendered at once
        max_size: Safety ceiling for ``size``

    Raises:
        ConfigurationError: ``size`` <= 0 or above ``max_size``
    """

    def __init__(self, table: RowSource, size: int = DEFAULT_VIEWPORT_SIZE, max_size: int = MAX_VIEWPORT_SIZE) -> None:
        if max_size <= 0:
            raise ConfigurationError(f"viewport max_size must be > 0 (got {max_size})")
        self._table = table
        self._max_size = max_size
        self._check_size(size)
        self._size = size
        self._start_index = 0
        self._total_dataset_size = 0
        self.refresh()

    @classmethod
    def from_config(cls, table: RowSource, config: ViewportConfig) -> ViewportWindow:
        return cls(table, size=config.size, max_size=config.max_size)

    @property
    def start_index(self) -> int:
        self.refresh()
        return self._start_index

    @property
    def size(self) -> int:
        return self._size

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def total_dataset_size(self) -> int:
        self.refresh()
        return self._total_dataset_size

    @property
    def end_index(self) -> int:
        return self.window()[1]

    def refresh(self) -> None:
        """Mirror the table's row count and keep ``start_index`` inside it."""
        self._total_dataset_size = self._table.row_count
        self._start_index = _clamp(self._start_index, 0, self._max_start())

    def scroll_to(self, row: int) -> int:
        """Center ``row`` in the window (clamped to the dataset). Returns the new start."""
        self.refresh()
        self._start_index = _clamp(row - self._size // 2, 0, self._max_start())
        logger.debug(f"viewport: scroll_to row={row} start={self._start_index}")
        return self._start_index

    def scroll_by(self, delta: int) -> int:
        """Move the window by ``delta`` rows (clamped). Returns the new start."""
        self.refresh()
        self._start_index = _clamp(self._start_index + delta, 0, self._max_start())
        logger.debug(f"viewport: scroll_by delta={delta} start={self._start_index}")
        return self._start_index

    def resize(self, new_size: int) -> None:
        self._check_size(new_size)
        self._size = new_size
        self.refresh()
        logger.debug(f"viewport: resize size={new_size} start={self._start_index}")

    def window(self) -> tuple[int, int]:
        """Inclusive ``(start, end)`` of the visible rows; ``(0, -1)`` for an empty table."""
        self.refresh()
        if self._total_dataset_size == 0:
            return (0, -1)
        end = min(self._start_index + self._size - 1, self._total_dataset_size - 1)
        return (self._start_index, end)

    def visible_row_indices(self) -> range:
        start, end = self.window()
        return range(start, end + 1)

    def contains(self, row: int) -> bool:
        return row in self.visible_row_indices()

    def visible_rows(self) -> list[dict[str, Any]]:
        """Pull row data for exactly the visible window."""
        return [self._table.get_row(i) for i in self.visible_row_indices()]

    def _max_start(self) -> int:
        return max(0, self._total_dataset_size - self._size)

    def _check_size(self, size: int) -> None:
        if size <= 0 or size > self._max_size:
            raise ConfigurationError(f"viewport size must be within 1-{self._max_size} (got {size})")
