"""Engine services: table engine, validation engine, viewport, search."""

from .search import search_table
from .table_engine import NotInitializedError, TableEngine
from .validation_engine import RuleEvaluationError, ValidationEngine
from .viewport import ViewportWindow

__all__ = [
    "NotInitializedError",
    "RuleEvaluationError",
    "TableEngine",
    "ValidationEngine",
    "ViewportWindow",
    "search_table",
]
