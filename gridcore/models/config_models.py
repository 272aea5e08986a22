from __future__ import annotations

from dataclasses import dataclass, field

from .column_definition import ColumnDefinition
from .validation import ValidationConfig

"""Config dataclasses for gridcore.

These are the domain objects produced by gridcore.config.loader from a YAML file.
"""

__all__ = [
    "ViewportConfig",
    "TimeoutConfig",
    "GridConfig",
]

DEFAULT_MINIMUM_ROW_COUNT = 15
DEFAULT_VIEWPORT_SIZE = 20
MAX_VIEWPORT_SIZE = 200
DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class ViewportConfig:
    """Viewport sizing. ``max_size`` is the safety ceiling for resize()."""
    size: int = DEFAULT_VIEWPORT_SIZE
    max_size: int = MAX_VIEWPORT_SIZE


@dataclass(frozen=True)
class TimeoutConfig:
    """Cooperative timeouts in seconds for bulk row operations."""
    import_seconds: float | None = DEFAULT_TIMEOUT_SECONDS  # None = no limit
    export_seconds: float | None = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class GridConfig:
    """Root configuration object for one table session."""
    columns: list[ColumnDefinition]  # As written in the file (arranged at initialize)
    minimum_row_count: int = DEFAULT_MINIMUM_ROW_COUNT
    validation: ValidationConfig | None = None
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
