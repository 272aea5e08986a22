from __future__ import annotations

import logging
import re
import time

from ..models.search import SearchConfiguration, SearchMatch, SearchMode, SearchResults
from .table_engine import TableEngine

"""Full-dataset text search.

Every non-empty row is searched (not only the viewport). Values are compared by
their ``str()`` form; at most one match is reported per cell (the first one).
"""

__all__ = [
    "search_table",
]

logger = logging.getLogger(__name__)


def _build_pattern(term: str, config: SearchConfiguration) -> re.Pattern[str]:
    body = term if config.is_regex else re.escape(term)
    if config.whole_word:
        body = rf"\b(?:{body})\b"
    if not config.is_regex:
        if config.mode is SearchMode.STARTS_WITH:
            body = rf"^(?:{body})"
        elif config.mode is SearchMode.ENDS_WITH:
            body = rf"(?:{body})$"
        elif config.mode is SearchMode.EXACT:
            body = rf"^(?:{body})$"
    flags = 0 if config.case_sensitive else re.IGNORECASE
    return re.compile(body, flags)


def search_table(table: TableEngine, term: str, config: SearchConfiguration | None = None) -> SearchResults:
    """Search the table for ``term``.

    Args:
        table: Initialized table engine
        term: Text (or regular expression when ``config.is_regex``)
        config: Search options, defaults to a case-insensitive CONTAINS search

    Returns:
        SearchResults with one SearchMatch per matching cell, in row/column order

    Raises:
        re.error: invalid regular expression
        IndexError: a target column name does not exist
    """
    config = config or SearchConfiguration()
    results = SearchResults(search_term=term, configuration=config)
    if term == "":
        return results

    started = time.perf_counter()
    matcher = _build_pattern(term, config)
    names = config.target_columns if config.target_columns is not None else table.column_names
    slots = [(name, table.column_index(name)) for name in names]
    rows = config.target_rows if config.target_rows is not None else range(table.row_count)

    for row in rows:
        if table.is_row_empty(row):
            continue
        for name, slot in slots:
            value = table.get_cell(row, slot)
            if value is None:
                continue
            text = str(value)
            found = matcher.search(text)
            if found is None:
                continue
            results.matches.append(
                SearchMatch(
                    row_index=row,
                    column_name=name,
                    matched_value=value,
                    matched_text=found.group(0),
                    match_start_index=found.start(),
                    match_length=found.end() - found.start(),
                )
            )

    results.search_duration_seconds = time.perf_counter() - started
    logger.debug(f"search: term={term!r} matches={results.total_match_count}")
    return results
