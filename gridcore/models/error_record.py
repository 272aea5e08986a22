from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ValidationIssueRecord model for validation logging.

One record per failing cell or failing cross-row check, written as JSON Lines by
gridcore.logging.error_log. The key set is fixed:

    {"timestamp", "row", "column", "issue_type", "message"}

``column`` is null for cross-row issues; ``row`` is -1 for cross-row failures that
are not tied to a specific row.
"""

__all__ = [
    "ValidationIssueRecord",
    "CELL_RULE",
    "CROSS_ROW",
]

CELL_RULE = "CELL_RULE"
CROSS_ROW = "CROSS_ROW"


@dataclass(frozen=True)
class ValidationIssueRecord:
    """Structured validation issue for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        row: Row index in the table. -1 when the issue has no row
        column: Column name, None for cross-row issues
        issue_type: CELL_RULE or CROSS_ROW
        message: Error message reported by the rule
    """
    timestamp: str
    row: int
    column: str | None
    issue_type: str
    message: str

    @staticmethod
    def create(row: int, column: str | None, issue_type: str, message: str) -> ValidationIssueRecord:
        """Create a new record stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ValidationIssueRecord(
            timestamp=ts,
            row=row,
            column=column,
            issue_type=issue_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
