from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from gridcore.models.error_record import ValidationIssueRecord

"""Validation log generation & buffering.

- JSON Lines with a fixed key set (see ValidationIssueRecord)
- One ``logs/validation-YYYYMMDD-HHMMSS.log`` (UTC) per buffer, created on demand
- Records are buffered and appended on flush()
"""

__all__ = [
    "ValidationIssueRecord",
    "ValidationLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ValidationLogBuffer:
    """In-memory buffer of validation issues. flush() appends JSON Lines to disk.

    Not thread-safe; the engine is single-writer.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ValidationIssueRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"validation-{stamp}.log"
        return self._file_path

    def append(self, record: ValidationIssueRecord) -> None:
        self._records.append(record)

    def extend(self, records: list[ValidationIssueRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path:
        if not self._records:
            return self.file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
