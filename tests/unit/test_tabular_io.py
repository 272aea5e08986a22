from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

from gridcore.tabular.reader import (
    MissingColumnsError,
    TabularFormatError,
    dataframe_to_rows,
    read_tabular_file,
)
from gridcore.tabular.writer import rows_to_dataframe, write_tabular_file


@pytest.fixture()
def people_csv(tmp_path: Path) -> Path:
    p = tmp_path / "people.csv"
    p.write_text("Name,Age\nAnn,30\n,\nNA,5\n  ,7\n", encoding="utf-8")
    return p


def test_read_csv_normalizes_values(people_csv: Path):
    rows = dataframe_to_rows(read_tabular_file(people_csv), expected_columns=["Name", "Age"])
    # The all-empty line is skipped
    assert len(rows) == 3
    assert rows[0] == {"Name": "Ann", "Age": 30}
    assert rows[1]["Name"] is None
    assert rows[2]["Name"] == ""


def test_keep_na_strings(people_csv: Path):
    rows = dataframe_to_rows(read_tabular_file(people_csv, keep_na_strings=["NA"]))
    assert rows[1]["Name"] == "NA"


def test_null_sentinels():
    df = pd.DataFrame({"Name": ["Ann", "null", " N/A "]})
    rows = dataframe_to_rows(df, null_sentinels={"NULL", "n/a"})
    assert [r["Name"] for r in rows] == ["Ann", None, None]


def test_timestamps_become_datetimes():
    df = pd.DataFrame({"When": [pd.Timestamp("2024-01-02 03:04:05")]})
    assert dataframe_to_rows(df) == [{"When": datetime(2024, 1, 2, 3, 4, 5)}]


def test_header_whitespace_is_stripped():
    df = pd.DataFrame({" Name ": ["Ann"]})
    assert dataframe_to_rows(df, expected_columns=["Name"]) == [{"Name": "Ann"}]


def test_missing_columns(people_csv: Path):
    with pytest.raises(MissingColumnsError, match="Email"):
        dataframe_to_rows(read_tabular_file(people_csv), expected_columns=["Name", "Email"])


def test_missing_file_and_bad_suffix(tmp_path: Path):
    with pytest.raises(TabularFormatError, match="not found"):
        read_tabular_file(tmp_path / "nope.csv")
    bad = tmp_path / "data.txt"
    bad.write_text("x", encoding="utf-8")
    with pytest.raises(TabularFormatError, match="unsupported file type"):
        read_tabular_file(bad)
    with pytest.raises(TabularFormatError):
        write_tabular_file([], ["A"], tmp_path / "out.json")


def test_rows_to_dataframe_keeps_column_order():
    df = rows_to_dataframe([{"B": 2, "A": 1}, {"A": 3}], ["A", "B"])
    assert list(df.columns) == ["A", "B"]
    assert df.iloc[1]["A"] == 3
    assert pd.isna(df.iloc[1]["B"])


def test_xlsx_write_and_read(tmp_path: Path):
    path = write_tabular_file(
        [{"Name": "Ann", "Age": 30}, {"Name": "Bob", "Age": 41}],
        ["Name", "Age"],
        tmp_path / "nested" / "people.xlsx",
    )
    assert path.exists()
    rows = dataframe_to_rows(read_tabular_file(path))
    assert rows == [{"Name": "Ann", "Age": 30}, {"Name": "Bob", "Age": 41}]


def test_blank_cell_keeps_integers_whole(tmp_path: Path):
    p = tmp_path / "ages.csv"
    p.write_text("Name,Age\nAnn,30\nBob,\n", encoding="utf-8")
    rows = dataframe_to_rows(read_tabular_file(p))
    assert rows == [{"Name": "Ann", "Age": 30}, {"Name": "Bob", "Age": None}]
    assert type(rows[0]["Age"]) is int


def test_fractional_floats_stay_floats():
    df = pd.DataFrame({"Price": [1.5, 2.0, None]})
    assert [r["Price"] for r in dataframe_to_rows(df)] == [1.5, 2, None]


def test_unknown_sheet_is_a_format_error(tmp_path: Path):
    path = write_tabular_file([{"Name": "Ann"}], ["Name"], tmp_path / "people.xlsx")
    with pytest.raises(TabularFormatError, match="Nope"):
        read_tabular_file(path, sheet_name="Nope")


def test_empty_csv_is_a_format_error(tmp_path: Path):
    p = tmp_path / "empty.csv"
    p.write_text("", encoding="utf-8")
    with pytest.raises(TabularFormatError, match="cannot read"):
        read_tabular_file(p)


def test_corrupt_workbook_is_a_format_error(tmp_path: Path):
    p = tmp_path / "broken.xlsx"
    p.write_text("not a workbook", encoding="utf-8")
    with pytest.raises(TabularFormatError, match="cannot read"):
        read_tabular_file(p)
