"""gridcore: headless table engine with row management, validation and a viewport window."""

from .models import ColumnDefinition, ConfigurationError, GridConfig, SpecialColumnKind, ValidationConfig
from .services import TableEngine, ValidationEngine, ViewportWindow, search_table

__all__ = [
    "ColumnDefinition",
    "ConfigurationError",
    "GridConfig",
    "SpecialColumnKind",
    "TableEngine",
    "ValidationConfig",
    "ValidationEngine",
    "ViewportWindow",
    "search_table",
]

__version__ = "0.1.0"
