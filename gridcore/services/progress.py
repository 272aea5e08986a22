from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import OperationProgress

"""Progress display service with tqdm (TTY only).

RowProgressTracker is passed as the ``progress`` callback of
TableEngine.import_rows / export_rows. In non-TTY environments (CI, pipes) no bar
is created so logs stay free of ANSI control sequences.
"""

__all__ = [
    "RowProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check if TTY output is enabled.

    Returns:
        True if stdout is a TTY and progress should be displayed, False otherwise
    """
    return sys.stdout.isatty()


class RowProgressTracker:
    """Row-level progress bar fed by OperationProgress snapshots.

    The bar is created lazily on the first report because the total row count is
    only known once the operation starts.
    """

    def __init__(self, *, description: str = "Processing rows") -> None:
        self.description = description
        self.processed = 0
        self.total = 0
        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None = None

    def __call__(self, progress: OperationProgress) -> None:
        self.report(progress)

    def report(self, progress: OperationProgress) -> None:
        """Advance the bar to ``progress.processed_items``."""
        self.total = progress.total_items
        if self.enabled:
            if self.pbar is None:
                self.pbar = tqdm(
                    total=progress.total_items,
                    desc=f"{self.description} ({progress.current_operation})",
                    unit="row",
                    disable=False,
                    leave=True,
                    position=0,
                    ncols=80,
                    ascii=True,
                )
            step = progress.processed_items - self.processed
            if step > 0:
                self.pbar.update(step)
        self.processed = progress.processed_items

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None
        # Next operation starts from zero
        self.processed = 0

    def __enter__(self) -> RowProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
