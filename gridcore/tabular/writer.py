from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from .reader import SUPPORTED_SUFFIXES, TabularFormatError

"""Tabular file writer (pandas): exported rows -> DataFrame -> .xlsx / .csv."""

__all__ = [
    "rows_to_dataframe",
    "write_tabular_file",
]


def rows_to_dataframe(rows: Sequence[dict[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    """Build a DataFrame with exactly ``columns`` in order (missing keys -> None)."""
    return pd.DataFrame([{c: row.get(c) for c in columns} for row in rows], columns=list(columns))


def write_tabular_file(rows: Sequence[dict[str, Any]], columns: Sequence[str], path: Path) -> Path:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise TabularFormatError(f"unsupported file type: {path.suffix or '<none>'}")
    df = rows_to_dataframe(rows, columns)
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        df.to_csv(path, index=False)
    else:
        df.to_excel(path, index=False, engine="openpyxl")
    return path
