from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Search models: configuration, matches and aggregated results."""

__all__ = [
    "SearchMode",
    "SearchConfiguration",
    "SearchMatch",
    "SearchResults",
]


class SearchMode(Enum):
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    EXACT = "exact"


@dataclass(frozen=True)
class SearchConfiguration:
    """How a search is performed.

    target_columns / target_rows restrict the search; None means all columns /
    all rows. ``is_regex`` takes precedence over ``mode``.
    """
    target_columns: list[str] | None = None
    target_rows: list[int] | None = None
    case_sensitive: bool = False
    is_regex: bool = False
    whole_word: bool = False
    mode: SearchMode = SearchMode.CONTAINS


@dataclass(frozen=True)
class SearchMatch:
    row_index: int
    column_name: str
    matched_value: Any
    matched_text: str
    match_start_index: int
    match_length: int


@dataclass
class SearchResults:
    search_term: str
    configuration: SearchConfiguration
    matches: list[SearchMatch] = field(default_factory=list)
    search_duration_seconds: float = 0.0

    @property
    def total_match_count(self) -> int:
        return len(self.matches)

    @property
    def has_matches(self) -> bool:
        return bool(self.matches)
