from __future__ import annotations

import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from gridcore.models.column_definition import (
    ColumnDefinition,
    ConfigurationError,
    SpecialColumnKind,
    validate_column_definitions,
)
from gridcore.models.config_models import (
    DEFAULT_MINIMUM_ROW_COUNT,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_VIEWPORT_SIZE,
    MAX_VIEWPORT_SIZE,
    GridConfig,
    TimeoutConfig,
    ViewportConfig,
)
from gridcore.models.validation import ValidationConfig
from gridcore.services.rules import UnknownRuleError, build_cell_rule, build_cross_row_rule

"""Grid config loader.

Responsibilities:
- Load a YAML grid config (default config/grid.yml)
- Validate it against grid_config_schema.json
- Apply defaults and build ColumnDefinition / ValidationConfig objects
"""

SCHEMA_PATH = Path(__file__).parent / "grid_config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/grid.yml")

VALUE_TYPES: dict[str, type] = {
    "any": object,
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "date": date,
    "datetime": datetime,
}


class ConfigError(ConfigurationError):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _build_column(raw: dict[str, Any]) -> ColumnDefinition:
    kind = raw.get("special_kind")
    return ColumnDefinition(
        name=raw["name"],
        display_name=raw.get("display_name"),
        value_type=VALUE_TYPES[raw.get("value_type", "any")],
        is_read_only=raw.get("read_only", False),
        min_width=raw.get("min_width"),
        max_width=raw.get("max_width"),
        is_sortable=raw.get("sortable", True),
        is_filterable=raw.get("filterable", True),
        special_kind=SpecialColumnKind(kind) if kind else None,
    )


def _build_validation(raw: dict[str, Any] | None, column_names: set[str]) -> ValidationConfig | None:
    if raw is None:
        return None
    config = ValidationConfig(
        enabled=raw.get("enabled", True),
        enable_batch_validation=raw.get("batch_after_import", False),
        enable_realtime_validation=raw.get("realtime", False),
    )
    try:
        for column, specs in (raw.get("rules") or {}).items():
            if column not in column_names:
                raise ConfigError(f"validation rules reference unknown column: {column}")
            for spec in specs:
                config.add_rule(column, build_cell_rule(column, spec, VALUE_TYPES))
        for spec in raw.get("cross_row_rules") or []:
            if spec["column"] not in column_names:
                raise ConfigError(f"cross-row rule references unknown column: {spec['column']}")
            config.add_cross_row_rule(build_cross_row_rule(spec))
    except KeyError as e:
        raise ConfigError(f"validation rule missing parameter: {e}") from e
    except (UnknownRuleError, re.error) as e:
        raise ConfigError(f"invalid validation rule: {e}") from e
    return config


def load_grid_config(path: Path = DEFAULT_CONFIG_PATH) -> GridConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    columns = [_build_column(c) for c in data["columns"]]
    try:
        validate_column_definitions(columns)
    except ConfigurationError as e:
        raise ConfigError(str(e)) from e

    viewport_raw = data.get("viewport", {})
    viewport = ViewportConfig(
        size=viewport_raw.get("size", DEFAULT_VIEWPORT_SIZE),
        max_size=viewport_raw.get("max_size", MAX_VIEWPORT_SIZE),
    )
    if viewport.size > viewport.max_size:
        raise ConfigError(f"viewport size {viewport.size} exceeds max_size {viewport.max_size}")

    timeouts_raw = data.get("timeouts", {})
    timeouts = TimeoutConfig(
        import_seconds=timeouts_raw.get("import_seconds", DEFAULT_TIMEOUT_SECONDS),
        export_seconds=timeouts_raw.get("export_seconds", DEFAULT_TIMEOUT_SECONDS),
    )

    return GridConfig(
        columns=columns,
        minimum_row_count=data.get("minimum_row_count", DEFAULT_MINIMUM_ROW_COUNT),
        validation=_build_validation(data.get("validation"), {c.name for c in columns}),
        viewport=viewport,
        timeouts=timeouts,
    )
