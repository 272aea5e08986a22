from __future__ import annotations

import threading
from pathlib import Path

from gridcore.config.loader import load_grid_config
from gridcore.models.search import SearchConfiguration
from gridcore.services.search import search_table
from gridcore.services.table_engine import TableEngine
from gridcore.services.viewport import ViewportWindow
from gridcore.tabular.reader import dataframe_to_rows, read_tabular_file
from gridcore.tabular.writer import write_tabular_file


def test_config_import_edit_validate_export(write_config: Path, temp_workdir: Path):
    cfg = load_grid_config(write_config)
    engine = TableEngine.from_config(cfg)
    viewport = ViewportWindow.from_config(engine, cfg.viewport)

    engine.import_rows([{"Name": f"user{i}", "Age": i, "Email": f"u{i}@x"} for i in range(30)])
    assert engine.row_count == 31
    assert viewport.scroll_to(25) == 20
    assert viewport.window() == (20, 29)

    # Edit a visible cell into an invalid value and fix it again
    engine.set_cell(25, "Age", 500)
    result = engine.validate_batch()
    assert result.cell_errors == {(25, "Age"): ["Age must be between 0 and 150"]}
    engine.set_cell(25, "Age", 25)
    assert engine.validate_dataset() is True

    hits = search_table(engine, "user2", SearchConfiguration(target_columns=["Name"]))
    assert hits.total_match_count == 11

    engine.smart_delete_rows(range(10))
    assert engine.data_row_count == 20
    assert viewport.total_dataset_size == engine.row_count

    out = write_tabular_file(engine.export_rows(), ["Name", "Age", "Email"], temp_workdir / "out.csv")
    rows = dataframe_to_rows(read_tabular_file(out))
    assert len(rows) == 20
    assert rows[0]["Name"] == "user10"


def test_cancelled_batch_from_another_thread(write_config: Path):
    engine = TableEngine.from_config(load_grid_config(write_config))
    engine.import_rows([{"Name": "", "Age": i, "Email": None} for i in range(10)])
    cancel = threading.Event()
    cancel.set()
    result = engine.validate_batch(cancel)
    assert result.cancelled is True
    assert result.processed_rows == 0
