from __future__ import annotations

import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

"""Tabular file reader (pandas).

Turns .xlsx / .csv files into the row shape the table engine imports: a list of
column name -> value maps. The first row of a sheet is the header.
"""

__all__ = [
    "TabularFormatError",
    "MissingColumnsError",
    "read_tabular_file",
    "dataframe_to_rows",
]

SUPPORTED_SUFFIXES = {".xlsx", ".csv"}


class TabularFormatError(Exception):
    """Raised when a file cannot be read as a table (unsupported suffix, missing file, unreadable content)."""


class MissingColumnsError(Exception):
    """Raised when expected columns are missing in the header."""


def read_tabular_file(
    path: Path,
    sheet_name: str | int | None = None,
    keep_na_strings: list[str] | None = None,
) -> pd.DataFrame:
    """Read one sheet of an Excel file, or a CSV file, into a DataFrame.

    Parameters
    ----------
    path: .xlsx or .csv file
    sheet_name: sheet to read for .xlsx (None = first sheet)
    keep_na_strings: strings pandas would turn into NaN by default but which must
        stay as text (e.g. ['NA'])
    """
    if not path.exists():
        raise TabularFormatError(f"input file not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise TabularFormatError(f"unsupported file type: {path.suffix or '<none>'}")

    # pandas keeps its default NA strings in a private set; drop the ones to keep
    import pandas._libs.parsers as parsers

    if keep_na_strings:
        na_values: list[str] | None = list(parsers.STR_NA_VALUES - set(keep_na_strings))
        keep_default_na = False
    else:
        na_values = None
        keep_default_na = True

    try:
        if suffix == ".csv":
            return pd.read_csv(path, keep_default_na=keep_default_na, na_values=na_values)
        return pd.read_excel(
            path,
            sheet_name=0 if sheet_name is None else sheet_name,
            engine="openpyxl",
            keep_default_na=keep_default_na,
            na_values=na_values,
        )
    except (ValueError, pd.errors.EmptyDataError, zipfile.BadZipFile) as e:
        # pandas reports a missing sheet or an empty CSV as ValueError
        raise TabularFormatError(f"cannot read {path}: {e}") from e


def _normalize_value(value: Any, null_sentinels: set[str] | None) -> Any:
    if isinstance(value, (list, tuple, dict)):
        return value
    if pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, float) and value.is_integer():
        # A blank cell turns an integer column into float64
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if null_sentinels and stripped.upper() in null_sentinels:
            return None
        if stripped == "":
            return ""
    return value


def dataframe_to_rows(
    df: pd.DataFrame,
    expected_columns: Iterable[str] | None = None,
    null_sentinels: set[str] | None = None,
) -> list[dict[str, Any]]:
    """Convert a DataFrame into import rows.

    Steps:
    1. Check expected columns are present in the header
    2. Skip rows where every value is NaN
    3. NaN -> None, whole-number floats -> int, whitespace-only strings -> "",
       null sentinel strings -> None
    """
    columns = [str(c).strip() for c in df.columns]
    if expected_columns is not None:
        missing = set(expected_columns) - set(columns)
        if missing:
            raise MissingColumnsError(f"missing columns: {sorted(missing)}")

    sentinels = {s.strip().upper() for s in null_sentinels} if null_sentinels else None
    frame = df.copy()
    frame.columns = columns
    frame = frame.dropna(how="all")
    rows: list[dict[str, Any]] = []
    for record in frame.to_dict(orient="records"):
        rows.append({str(k): _normalize_value(v, sentinels) for k, v in record.items()})
    return rows
