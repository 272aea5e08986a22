from __future__ import annotations

from ..models.processing_result import BatchValidationResult

"""Summary line rendering for validation runs.

Format:
SUMMARY rows={rows} data_rows={data_rows} valid_cells={valid} invalid_cells={invalid}
cross_row_errors={cross_row} elapsed_sec={elapsed}
"""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(total_rows: int, data_rows: int, result: BatchValidationResult, elapsed_seconds: float) -> str:
    """Render a SUMMARY line for one validation run.

    Examples:
        >>> r = BatchValidationResult(valid_cells_count=4)
        >>> render_summary_line(5, 2, r, 0.5)
        'SUMMARY rows=5 data_rows=2 valid_cells=4 invalid_cells=0 cross_row_errors=0 elapsed_sec=0.5'
    """
    return (
        f"SUMMARY rows={total_rows} "
        f"data_rows={data_rows} "
        f"valid_cells={result.valid_cells_count} "
        f"invalid_cells={result.invalid_cells_count} "
        f"cross_row_errors={result.cross_row_error_count} "
        f"elapsed_sec={_format_number(elapsed_seconds)}"
    )
