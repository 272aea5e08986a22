from __future__ import annotations

import threading
from unittest.mock import Mock

import pytest

from gridcore.models.column_definition import ColumnDefinition, SpecialColumnKind
from gridcore.models.row import DataRow
from gridcore.models.validation import CrossRowResult, CrossRowRule, ValidationConfig, ValidationRule
from gridcore.services.validation_engine import RuleEvaluationError, ValidationEngine

COLUMNS = [
    ColumnDefinition("Name"),
    ColumnDefinition("Age"),
    ColumnDefinition("alerts", special_kind=SpecialColumnKind.VALIDATION_ALERTS),
]


def _rows(*values: tuple) -> list[DataRow]:
    rows = []
    for i, vals in enumerate(values):
        row = DataRow(i, len(COLUMNS))
        for slot, v in enumerate(vals):
            row.set(slot, v)
        rows.append(row)
    return rows


def _config() -> ValidationConfig:
    config = ValidationConfig()
    config.add_rule("Name", ValidationRule("name_required", lambda v: bool(v), "name required"))
    config.add_rule("Age", ValidationRule("age_int", lambda v: v is None or isinstance(v, int), "age not int"))
    config.add_rule("Age", ValidationRule("age_positive", lambda v: v is None or v > 0, "age not positive"))
    return config


def test_disabled_engine_reports_valid():
    engine = ValidationEngine(ValidationConfig())
    assert engine.is_enabled is False
    rows = _rows(("", -1))
    assert engine.are_all_non_empty_rows_valid(rows, COLUMNS) is True
    result = engine.validate_all_rows_batch(rows, COLUMNS)
    assert result.has_errors is False
    assert result.valid_cells_count == 0


def test_engine_without_config_accepts_everything():
    engine = ValidationEngine()
    rows = _rows(("", -1))
    assert engine.is_enabled is False
    assert engine.are_all_non_empty_rows_valid(rows, COLUMNS) is True
    assert engine.validate_all_rows_batch(rows, COLUMNS).processed_rows == 0
    assert engine.validate_cell(rows[0], 1, COLUMNS[1]) is True
    assert rows[0].get_state(1).is_valid is True

def test_config_disabled_flag():
    config = _config()
    config.enabled = False
    assert ValidationEngine(config).is_enabled is False


def test_first_failing_rule_wins():
    engine = ValidationEngine(_config())
    rows = _rows(("Ann", "x"))
    result = engine.validate_all_rows_batch(rows, COLUMNS)
    assert result.cell_errors == {(0, "Age"): ["age not int"]}
    assert rows[0].get_state(1).error_message == "age not int"


def test_invalid_count_matches_failing_cells():
    engine = ValidationEngine(_config())
    rows = _rows(("Ann", 3), ("", -1), (None, None), ("Bob", 0))
    result = engine.validate_all_rows_batch(rows, COLUMNS)
    # row 2 is empty and skipped; row 1 fails Name and Age; row 3 fails Age
    assert result.invalid_cells_count == 3
    assert result.valid_cells_count == 3
    assert result.processed_rows == 3
    assert rows[0].get_state(0).is_valid is True


def test_special_columns_are_not_validated():
    config = _config()
    config.add_rule("alerts", ValidationRule("never", lambda v: False, "never"))
    engine = ValidationEngine(config)
    rows = _rows(("Ann", 3, None))
    assert engine.are_all_non_empty_rows_valid(rows, COLUMNS) is True


def test_disabled_rule_is_skipped():
    config = ValidationConfig()
    config.add_rule("Name", ValidationRule("off", lambda v: False, "off", is_enabled=False))
    config.add_rule("Name", ValidationRule("on", lambda v: True, "on"))
    engine = ValidationEngine(config)
    assert engine.are_all_non_empty_rows_valid(_rows(("Ann",)), COLUMNS) is True


def test_short_circuit_stops_at_first_failure():
    calls = Mock(return_value=False)
    config = ValidationConfig()
    config.add_rule("Name", ValidationRule("mock", calls, "bad"))
    engine = ValidationEngine(config)
    assert engine.are_all_non_empty_rows_valid(_rows(("a",), ("b",), ("c",)), COLUMNS) is False
    assert calls.call_count == 1


def test_cross_row_rule_maps_positions_to_row_indices():
    def _flag_second(rows):
        return CrossRowResult.error("dup", {1: "dup"}) if len(rows) > 1 else CrossRowResult.success()

    config = ValidationConfig()
    config.add_cross_row_rule(CrossRowRule("flag_second", _flag_second))
    engine = ValidationEngine(config)
    # Row 1 is empty, so snapshot position 1 is row index 2
    rows = _rows(("A", 1), (None, None), ("B", 2))
    result = engine.validate_all_rows_batch(rows, COLUMNS)
    assert result.row_errors == {2: "dup"}
    assert rows[2].row_error == "dup"
    assert rows[0].row_error is None


def test_cross_row_global_error():
    config = ValidationConfig()
    config.add_cross_row_rule(CrossRowRule("too_few", lambda rows: CrossRowResult.error("need 3 rows")))
    engine = ValidationEngine(config)
    result = engine.validate_all_rows_batch(_rows(("A", 1)), COLUMNS)
    assert result.global_errors == ["need 3 rows"]
    assert result.cross_row_error_count == 1


def test_multiple_cross_row_rules_accumulate():
    config = ValidationConfig()
    config.add_cross_row_rule(CrossRowRule("r1", lambda rows: CrossRowResult.error("first", {0: "first"})))
    config.add_cross_row_rule(CrossRowRule("r2", lambda rows: CrossRowResult.error("second", {0: "second"})))
    engine = ValidationEngine(config)
    rows = _rows(("A", 1))
    result = engine.validate_all_rows_batch(rows, COLUMNS)
    assert result.row_errors == {0: "first; second"}
    assert rows[0].error_messages() == ["first; second"]


def test_cancel_before_start():
    cancel = threading.Event()
    cancel.set()
    engine = ValidationEngine(_config())
    result = engine.validate_all_rows_batch(_rows(("", 1)), COLUMNS, cancel_event=cancel)
    assert result.cancelled is True
    assert result.processed_rows == 0
    assert result.has_errors is False


def test_cancel_midway_skips_cross_row_rules():
    config = _config()
    config.add_cross_row_rule(CrossRowRule("always", lambda rows: CrossRowResult.error("x", {0: "x"})))
    cancel = Mock()
    cancel.is_set.side_effect = [False, True]
    engine = ValidationEngine(config)
    rows = _rows(("", 1), ("", 2))
    result = engine.validate_all_rows_batch(rows, COLUMNS, cancel_event=cancel)
    assert result.cancelled is True
    assert result.processed_rows == 1
    assert result.invalid_cells_count == 1
    assert result.row_errors == {}
    assert rows[1].get_state(0).is_valid is True


def test_broken_cell_rule_raises_rule_evaluation_error():
    config = ValidationConfig()
    config.add_rule("Age", ValidationRule("boom", lambda v: 1 / 0, "boom"))
    engine = ValidationEngine(config)
    with pytest.raises(RuleEvaluationError, match="boom") as exc:
        engine.validate_all_rows_batch(_rows(("A", 1)), COLUMNS)
    assert exc.value.row_index == 0
    assert exc.value.column_name == "Age"
    assert isinstance(exc.value.__cause__, ZeroDivisionError)


def test_broken_cross_row_rule_raises():
    def _broken(rows):
        raise KeyError("missing")

    config = ValidationConfig()
    config.add_cross_row_rule(CrossRowRule("broken", _broken))
    engine = ValidationEngine(config)
    with pytest.raises(RuleEvaluationError, match="cross-row"):
        engine.are_all_non_empty_rows_valid(_rows(("A", 1)), COLUMNS)


def test_validate_cell_replaces_state():
    engine = ValidationEngine(_config())
    row = _rows(("", 1))[0]
    assert engine.validate_cell(row, 0, COLUMNS[0]) is False
    assert row.get_state(0).error_message == "name required"
    row.set(0, "Ann")
    assert engine.validate_cell(row, 0, COLUMNS[0]) is True
    assert row.get_state(0).is_valid is True
