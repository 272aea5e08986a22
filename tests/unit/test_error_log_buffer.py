from __future__ import annotations

import json
import re
from pathlib import Path

from gridcore.logging.error_log import ValidationLogBuffer
from gridcore.models.error_record import CELL_RULE, CROSS_ROW, ValidationIssueRecord


def test_flush_writes_json_lines(temp_workdir: Path):
    buf = ValidationLogBuffer()
    buf.append(ValidationIssueRecord.create(0, "Name", CELL_RULE, "Name is required"))
    buf.extend([ValidationIssueRecord.create(1, None, CROSS_ROW, "Email must be unique")])
    assert len(buf) == 2

    path = buf.flush()
    assert path.parent == Path("logs")
    assert re.fullmatch(r"validation-\d{8}-\d{6}\.log", path.name)
    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [line["issue_type"] for line in lines] == [CELL_RULE, CROSS_ROW]
    assert lines[1]["column"] is None
    assert len(buf) == 0


def test_flush_appends_to_same_file(tmp_path: Path):
    buf = ValidationLogBuffer(logs_dir=tmp_path / "out")
    buf.append(ValidationIssueRecord.create(0, "A", CELL_RULE, "one"))
    first = buf.flush()
    buf.append(ValidationIssueRecord.create(1, "A", CELL_RULE, "two"))
    second = buf.flush()
    assert first == second
    assert len(first.read_text(encoding="utf-8").splitlines()) == 2


def test_flush_empty_buffer_writes_nothing(tmp_path: Path):
    buf = ValidationLogBuffer(logs_dir=tmp_path)
    path = buf.flush()
    assert not path.exists()
