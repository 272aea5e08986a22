"""Domain models for the gridcore table engine.

This package contains the data classes shared by the table engine, the
validation engine and the viewport window.
"""

from .column_definition import (
    ColumnDefinition,
    ConfigurationError,
    SpecialColumnKind,
    arrange_columns,
    validate_column_definitions,
)
from .config_models import GridConfig, TimeoutConfig, ViewportConfig
from .error_record import ValidationIssueRecord
from .processing_result import BatchValidationResult, OperationProgress
from .row import CellUIState, DataRow
from .search import SearchConfiguration, SearchMatch, SearchMode, SearchResults
from .validation import CrossRowResult, CrossRowRule, ValidationConfig, ValidationRule

__all__ = [
    # Column models
    "ColumnDefinition",
    "ConfigurationError",
    "SpecialColumnKind",
    "arrange_columns",
    "validate_column_definitions",
    # Configuration models
    "GridConfig",
    "TimeoutConfig",
    "ViewportConfig",
    # Row store
    "CellUIState",
    "DataRow",
    # Validation models
    "CrossRowResult",
    "CrossRowRule",
    "ValidationConfig",
    "ValidationRule",
    "BatchValidationResult",
    "ValidationIssueRecord",
    "OperationProgress",
    # Search models
    "SearchConfiguration",
    "SearchMatch",
    "SearchMode",
    "SearchResults",
]
