# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from gridcore.logging.init import reset_logging
from gridcore.models.column_definition import ColumnDefinition, SpecialColumnKind
from gridcore.models.validation import ValidationConfig
from gridcore.services import rules
from gridcore.services.table_engine import TableEngine


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """minimum_row_count: 3
viewport:
  size: 10
  max_size: 200
timeouts:
  import_seconds: 30
  export_seconds: 30
columns:
  - name: Name
    value_type: str
  - name: Age
    value_type: int
  - name: Email
    value_type: str
  - name: alerts
    special_kind: validation_alerts
validation:
  enabled: true
  rules:
    Name:
      - type: required
        message: Name is required
    Age:
      - type: type
        value_type: int
      - type: range
        min: 0
        max: 150
        message: Age must be between 0 and 150
  cross_row_rules:
    - type: unique
      column: Email
      message: Email must be unique
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "grid.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def name_age_columns() -> list[ColumnDefinition]:
    return [
        ColumnDefinition("Name", value_type=str),
        ColumnDefinition("Age", value_type=int),
    ]


@pytest.fixture()
def engine(name_age_columns) -> TableEngine:
    """Initialized engine with columns [Name, Age] and minimum_row_count=2."""
    e = TableEngine()
    e.initialize(name_age_columns, minimum_row_count=2)
    return e


@pytest.fixture()
def validating_engine() -> TableEngine:
    """Engine with required/range rules, a unique Email rule and an alerts column."""
    config = ValidationConfig()
    config.add_rule("Name", rules.required("Name", "Name is required"))
    config.add_rule("Age", rules.value_type("Age", int, "Age must be an integer"))
    config.add_rule("Age", rules.value_range("Age", 0, 150, "Age must be between 0 and 150"))
    config.add_cross_row_rule(rules.unique("Email", "Email must be unique"))
    columns = [
        ColumnDefinition("select", special_kind=SpecialColumnKind.CHECKBOX),
        ColumnDefinition("Name", value_type=str),
        ColumnDefinition("Age", value_type=int),
        ColumnDefinition("Email", value_type=str),
        ColumnDefinition("alerts", special_kind=SpecialColumnKind.VALIDATION_ALERTS),
        ColumnDefinition("delete", special_kind=SpecialColumnKind.DELETE_ROW),
    ]
    e = TableEngine()
    e.initialize(columns, config, minimum_row_count=2)
    return e


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()
