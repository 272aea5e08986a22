from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from ..models.row import is_empty_value
from ..models.validation import CrossRowResult, CrossRowRule, ValidationRule

"""Declarative rule builders.

Each builder returns a ValidationRule / CrossRowRule. Apart from ``required``,
cell rules pass on empty values so that "required" stays a separate decision.
``build_cell_rule`` / ``build_cross_row_rule`` turn the YAML rule mappings of a
grid config into rules.
"""

__all__ = [
    "required",
    "value_type",
    "min_length",
    "max_length",
    "pattern",
    "value_range",
    "one_of",
    "unique",
    "build_cell_rule",
    "build_cross_row_rule",
    "UnknownRuleError",
]


class UnknownRuleError(ValueError):
    """Raised when a rule mapping names a rule type that does not exist."""


def required(column: str, message: str | None = None) -> ValidationRule:
    return ValidationRule(
        name=f"{column}_required",
        validator=lambda v: not is_empty_value(v),
        error_message=message or f"{column} is required",
    )


def value_type(column: str, expected: type, message: str | None = None) -> ValidationRule:
    def _check(v: Any) -> bool:
        if is_empty_value(v) or expected is object:
            return True
        if expected is int and isinstance(v, bool):
            return False
        if expected is float and isinstance(v, int) and not isinstance(v, bool):
            return True
        return isinstance(v, expected)

    return ValidationRule(
        name=f"{column}_type",
        validator=_check,
        error_message=message or f"{column} must be of type {expected.__name__}",
    )


def min_length(column: str, length: int, message: str | None = None) -> ValidationRule:
    return ValidationRule(
        name=f"{column}_min_length",
        validator=lambda v: is_empty_value(v) or len(str(v)) >= length,
        error_message=message or f"{column} must be at least {length} characters",
    )


def max_length(column: str, length: int, message: str | None = None) -> ValidationRule:
    return ValidationRule(
        name=f"{column}_max_length",
        validator=lambda v: is_empty_value(v) or len(str(v)) <= length,
        error_message=message or f"{column} must be at most {length} characters",
    )


def pattern(column: str, regex: str, message: str | None = None) -> ValidationRule:
    compiled = re.compile(regex)
    return ValidationRule(
        name=f"{column}_pattern",
        validator=lambda v: is_empty_value(v) or compiled.fullmatch(str(v)) is not None,
        error_message=message or f"{column} does not match pattern {regex}",
    )


def value_range(
    column: str,
    minimum: float | None = None,
    maximum: float | None = None,
    message: str | None = None,
) -> ValidationRule:
    def _check(v: Any) -> bool:
        if is_empty_value(v):
            return True
        try:
            number = float(v)
        except (TypeError, ValueError):
            return False
        if minimum is not None and number < minimum:
            return False
        if maximum is not None and number > maximum:
            return False
        return True

    return ValidationRule(
        name=f"{column}_range",
        validator=_check,
        error_message=message or f"{column} must be between {minimum} and {maximum}",
    )


def one_of(column: str, allowed: Iterable[Any], message: str | None = None) -> ValidationRule:
    allowed_values = list(allowed)
    return ValidationRule(
        name=f"{column}_one_of",
        validator=lambda v: is_empty_value(v) or v in allowed_values,
        error_message=message or f"{column} must be one of {allowed_values}",
    )


def unique(column: str, message: str | None = None, case_sensitive: bool = True) -> CrossRowRule:
    """Flag every row whose value in ``column`` also appears in another row."""
    text = message or f"{column} must be unique"

    def _key(v: Any) -> Any:
        return v.casefold() if isinstance(v, str) and not case_sensitive else v

    def _check(rows: Any) -> CrossRowResult:
        positions: dict[Any, list[int]] = {}
        for i, row in enumerate(rows):
            value = row.get(column)
            if is_empty_value(value):
                continue
            positions.setdefault(_key(value), []).append(i)
        duplicates = {i: text for idx in positions.values() if len(idx) > 1 for i in idx}
        if not duplicates:
            return CrossRowResult.success()
        return CrossRowResult.error(text, duplicates)

    return CrossRowRule(name=f"{column}_unique", validator=_check)


def build_cell_rule(column: str, spec: Mapping[str, Any], value_types: Mapping[str, type]) -> ValidationRule:
    """Build a cell rule from a config mapping such as ``{"type": "range", "min": 0}``."""
    kind = spec["type"]
    message = spec.get("message")
    if kind == "required":
        return required(column, message)
    if kind == "type":
        return value_type(column, value_types[spec["value_type"]], message)
    if kind == "min_length":
        return min_length(column, spec["length"], message)
    if kind == "max_length":
        return max_length(column, spec["length"], message)
    if kind == "pattern":
        return pattern(column, spec["regex"], message)
    if kind == "range":
        return value_range(column, spec.get("min"), spec.get("max"), message)
    if kind == "one_of":
        return one_of(column, spec["values"], message)
    raise UnknownRuleError(f"unknown cell rule type: {kind}")


def build_cross_row_rule(spec: Mapping[str, Any]) -> CrossRowRule:
    kind = spec["type"]
    if kind == "unique":
        return unique(spec["column"], spec.get("message"), spec.get("case_sensitive", True))
    raise UnknownRuleError(f"unknown cross-row rule type: {kind}")
