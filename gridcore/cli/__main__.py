from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

from gridcore.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_grid_config
from gridcore.logging.error_log import ValidationLogBuffer
from gridcore.logging.init import log_summary, setup_logging
from gridcore.services.progress import RowProgressTracker
from gridcore.services.summary import render_summary_line
from gridcore.services.table_engine import TableEngine
from gridcore.tabular.reader import (
    SUPPORTED_SUFFIXES,
    MissingColumnsError,
    TabularFormatError,
    dataframe_to_rows,
    read_tabular_file,
)
from gridcore.tabular.writer import write_tabular_file

"""CLI entrypoint: load a tabular file into a grid, validate it, report.

Flow:
- Load .env, then the grid config (GRIDCORE_CONFIG or --config, default config/grid.yml)
- Read the input file with pandas and import it into a fresh table engine
- Run batch validation over the whole dataset (once) and log a SUMMARY line
- Write a validation log when there are issues; optionally export to --output
"""

EXIT_ALL_VALID = 0
EXIT_FATAL = 1
EXIT_INVALID_DATA = 2

CONFIG_ENV_VAR = "GRIDCORE_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv; a broken file only produces a warning."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except (OSError, ValueError) as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="gridcore", description="Load, validate and export grid data")
    p.add_argument("--config", type=Path, default=None, help="Grid config YAML (default: config/grid.yml)")
    p.add_argument("--input", type=Path, required=True, help="Input .xlsx or .csv file")
    p.add_argument("--sheet", default=None, help="Sheet name for .xlsx input (default: first sheet)")
    p.add_argument("--output", type=Path, default=None, help="Export every non-empty grid row to .xlsx or .csv")
    p.add_argument("--include-alerts", action="store_true", help="Export the validation alerts column")
    p.add_argument("--remove-after", action="store_true", help="Remove exported rows from the grid after export")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_value = os.getenv(CONFIG_ENV_VAR)
    return Path(env_value) if env_value else DEFAULT_CONFIG_PATH


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read sys.argv when no argv is given (tests pass [] explicitly)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    config_path = _resolve_config_path(args)
    try:
        cfg = load_grid_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    # Reject an unwritable --output before any rows are imported or removed
    if args.output is not None and args.output.suffix.lower() not in SUPPORTED_SUFFIXES:
        logger.error(f"output: unsupported file type: {args.output.suffix or '<none>'}")
        return EXIT_FATAL

    started = time.perf_counter()
    try:
        df = read_tabular_file(args.input, sheet_name=args.sheet)
        user_columns = [c.name for c in cfg.columns if not c.is_special]
        rows = dataframe_to_rows(df, expected_columns=user_columns)
    except (TabularFormatError, MissingColumnsError) as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL

    engine = TableEngine.from_config(cfg)
    logger.info(f"Importing {len(rows)} rows from: {args.input}")
    try:
        with RowProgressTracker(description="Importing") as tracker:
            engine.import_rows(rows, timeout=cfg.timeouts.import_seconds, progress=tracker)
    except TimeoutError as e:
        logger.error(f"import: {e}")
        return EXIT_FATAL

    # import_rows already ran batch validation when the config asks for it
    result = engine.last_batch_result
    if result is None:
        result = engine.validate_batch()
    elapsed = time.perf_counter() - started

    if result.has_errors:
        buffer = ValidationLogBuffer()
        buffer.extend(result.to_records())
        log_path = buffer.flush()
        logger.warning(f"validation issues written to: {log_path}")

    if args.output is not None:
        try:
            with RowProgressTracker(description="Exporting") as tracker:
                exported = engine.export_rows(
                    include_validation_alerts=args.include_alerts,
                    remove_after=args.remove_after,
                    timeout=cfg.timeouts.export_seconds,
                    progress=tracker,
                )
        except TimeoutError as e:
            logger.error(f"export: {e}")
            return EXIT_FATAL
        export_columns = list(exported[0].keys()) if exported else user_columns
        try:
            write_tabular_file(exported, export_columns, args.output)
        except (TabularFormatError, OSError) as e:
            logger.error(f"output: {e}")
            return EXIT_FATAL
        logger.info(f"exported {len(exported)} rows to: {args.output}")

    summary_line = render_summary_line(engine.row_count, engine.data_row_count, result, elapsed)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])

    return EXIT_INVALID_DATA if result.has_errors else EXIT_ALL_VALID


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
