"""
CSV batch classification with per-row failure isolation.
"""

from satclass.ml.batch.batch_processor import (
    BatchFailure,
    BatchProcessor,
    BatchResult,
    BatchRow,
    BatchStatistics,
    parse_csv_rows,
    parse_row,
    summarize_failures,
)

__all__ = [
    "BatchFailure",
    "BatchProcessor",
    "BatchResult",
    "BatchRow",
    "BatchStatistics",
    "parse_csv_rows",
    "parse_row",
    "summarize_failures",
]
