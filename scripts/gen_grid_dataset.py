#!/usr/bin/env python3
"""Dataset generation script for grid import testing.

Generates a synthetic .csv or .xlsx file whose header matches the sample grid
config (Name, Age, Email). A share of rows can be made invalid on purpose so the
validation path of ``python -m gridcore.cli`` is exercised:
- missing Name
- Age outside 0-150
- duplicated Email
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd


def generate_grid_data(rows: int, invalid_ratio: float = 0.0, seed: int = 42) -> pd.DataFrame:
    """Generate grid rows with roughly ``invalid_ratio`` of them breaking one rule.

    Args:
        rows: Number of data rows to generate
        invalid_ratio: Share of rows (0-1) to corrupt
        seed: Random seed for reproducible data

    Returns:
        DataFrame with Name, Age and Email columns
    """
    rng = np.random.default_rng(seed)
    names = [f"user_{i:06d}" for i in range(rows)]
    ages = rng.integers(0, 100, size=rows).tolist()
    emails = [f"user_{i:06d}@example.com" for i in range(rows)]

    bad = rng.random(rows) < invalid_ratio
    kinds = rng.integers(0, 3, size=rows)
    for i in np.flatnonzero(bad):
        if kinds[i] == 0:
            names[i] = None
        elif kinds[i] == 1:
            ages[i] = int(rng.integers(151, 1000))
        elif i > 0:
            emails[i] = emails[i - 1]

    return pd.DataFrame({"Name": names, "Age": ages, "Email": emails})


def write_dataset(df: pd.DataFrame, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.suffix.lower() == ".csv":
        df.to_csv(output_path, index=False)
    else:
        df.to_excel(output_path, index=False, engine="openpyxl")
    print(f"Created dataset: {output_path}")
    print(f"  Rows: {len(df):,}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a synthetic grid dataset")
    parser.add_argument("--rows", type=int, default=10_000, help="Number of data rows (default: 10000)")
    parser.add_argument(
        "--invalid-ratio",
        type=float,
        default=0.0,
        help="Share of rows breaking a validation rule, 0-1 (default: 0)",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("data/grid_dataset.csv"),
        help="Output .csv or .xlsx file (default: data/grid_dataset.csv)",
    )
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.invalid_ratio <= 1:
        print("Error: --invalid-ratio must be within 0-1", file=sys.stderr)
        return 1
    if args.output.suffix.lower() not in {".csv", ".xlsx"}:
        print("Error: --output must end with .csv or .xlsx", file=sys.stderr)
        return 1

    write_dataset(generate_grid_data(args.rows, args.invalid_ratio, args.seed), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
