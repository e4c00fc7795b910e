"""
CSV Batch Classification.

Parses uploaded CSV text into orbital samples, classifies each row and
folds the outcomes into ordered successes and per-line failures. A bad
row never aborts the batch; a batch without a single usable row does.

Expected columns (extra columns are ignored):
    latitude, longitude, x_eci, y_eci, z_eci, vel_x, vel_y, vel_z

Author: Space AI Team
"""

from __future__ import annotations

import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from satclass.core.exceptions import BatchProcessingError, ParseError, SatClassError
from satclass.ml.classifier import PredictionResult, RuleClassifier
from satclass.ml.features import OrbitalSample
from satclass.monitoring import PredictionLog
from satclass.utils.config_loader import BatchConfig
from satclass.utils.logging_config import get_logger

logger = get_logger("batch")


# -----------------------------------------------------------------------
# Result dataclasses
# -----------------------------------------------------------------------

@dataclass
class BatchRow:
    """A successfully classified CSV row."""
    line_number: int          # 1-based line in the uploaded text
    sample: OrbitalSample
    result: PredictionResult
    processing_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_number": self.line_number,
            "input": self.sample.to_dict(),
            **self.result.to_dict(),
        }


@dataclass
class BatchFailure:
    """A CSV row that could not be parsed or classified."""
    line_number: int
    reason: str

    def __str__(self) -> str:
        return f"Line {self.line_number}: {self.reason}"


@dataclass
class BatchStatistics:
    """Aggregates over the successful rows of a batch."""
    success_count: int
    failure_count: int
    count_by_class: Dict[str, int]
    mean_confidence: float
    mean_altitude_km: float

    @classmethod
    def from_rows(
        cls,
        rows: List[BatchRow],
        failures: List[BatchFailure],
        classes: List[str],
    ) -> "BatchStatistics":
        counts = {name: 0 for name in classes}
        for row in rows:
            counts[row.result.predicted_class] = counts.get(row.result.predicted_class, 0) + 1
        n = len(rows)
        return cls(
            success_count=n,
            failure_count=len(failures),
            count_by_class=counts,
            mean_confidence=sum(r.result.confidence for r in rows) / n if n else 0.0,
            mean_altitude_km=sum(r.result.altitude_km for r in rows) / n if n else 0.0,
        )


@dataclass
class BatchResult:
    """Outcome of processing one CSV upload."""
    successes: List[BatchRow]
    failures: List[BatchFailure]
    stats: BatchStatistics
    total_lines: int = 0
    has_header: bool = False
    elapsed_ms: float = 0.0

    def error_summary(self, limit: int = 5) -> str:
        return summarize_failures(self.failures, limit)


def summarize_failures(failures: List[BatchFailure], limit: int = 5) -> str:
    """First failures as text, with a count of the rest."""
    lines = [str(f) for f in failures[:limit]]
    remaining = len(failures) - limit
    if remaining > 0:
        lines.append(f"... and {remaining} more errors")
    return "\n".join(lines)


# -----------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------

def split_lines(text: str) -> List[Tuple[int, str]]:
    """Non-blank trimmed lines with their 1-based line numbers (CRLF/CR/LF)."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    return [
        (number, line.strip())
        for number, line in enumerate(normalized.split("\n"), start=1)
        if line.strip()
    ]


def is_header(line: str, tokens=("lat", "lon")) -> bool:
    lowered = line.lower()
    return any(token in lowered for token in tokens)


def parse_row(line_number: int, line: str, required_columns: int = 8) -> OrbitalSample:
    """
    Parse one CSV data line.

    Raises:
        ParseError: too few columns or a non-numeric value.
    """
    values = [v.strip() for v in line.split(",")]
    if len(values) < required_columns:
        raise ParseError(
            line_number,
            f"Not enough columns (found {len(values)}, need {required_columns})",
        )

    numbers: List[float] = []
    invalid: List[int] = []
    for position, raw in enumerate(values[:required_columns], start=1):
        try:
            number = float(raw)
        except ValueError:
            invalid.append(position)
            continue
        if not math.isfinite(number):
            invalid.append(position)
            continue
        numbers.append(number)

    if invalid:
        raise ParseError(
            line_number,
            f"Invalid numeric values at positions {', '.join(str(p) for p in invalid)}",
        )
    return OrbitalSample.from_values(numbers)


def parse_csv_rows(
    text: str,
    config: Optional[BatchConfig] = None,
) -> Tuple[List[Tuple[int, OrbitalSample]], List[BatchFailure], bool]:
    """
    Parse CSV text into samples.

    Returns:
        (parsed rows as (line_number, sample), parse failures, header found)

    Raises:
        BatchProcessingError: if there is no data line at all.
    """
    config = config or BatchConfig()
    lines = split_lines(text or "")
    if not lines:
        raise BatchProcessingError("CSV file is empty")

    has_header = is_header(lines[0][1], config.header_tokens)
    data_lines = lines[1:] if has_header else lines
    if not data_lines:
        raise BatchProcessingError("No valid data rows found in CSV file")

    parsed: List[Tuple[int, OrbitalSample]] = []
    failures: List[BatchFailure] = []
    for line_number, line in data_lines:
        try:
            parsed.append((line_number, parse_row(line_number, line, config.required_columns)))
        except ParseError as e:
            failures.append(BatchFailure(line_number, e.reason))
    return parsed, failures, has_header


# -----------------------------------------------------------------------
# Batch Processor
# -----------------------------------------------------------------------

class BatchProcessor:
    """Runs the rule classifier over every row of a CSV upload."""

    def __init__(
        self,
        classifier: Optional[RuleClassifier] = None,
        config: Optional[BatchConfig] = None,
        prediction_log: Optional[PredictionLog] = None,
    ):
        self.classifier = classifier or RuleClassifier()
        self.config = config or BatchConfig()
        self.prediction_log = prediction_log

    def _classify_row(self, item: Tuple[int, OrbitalSample]):
        line_number, sample = item
        start = time.perf_counter()
        try:
            result = self.classifier.classify(sample)
        except SatClassError as e:
            reason = e.message.replace("\n", "; ")
            return BatchFailure(line_number, f"Prediction failed - {reason}")
        elapsed_ms = (time.perf_counter() - start) * 1000
        return BatchRow(line_number, sample, result, elapsed_ms)

    def process_batch(self, raw_text: str) -> BatchResult:
        """
        Classify every data row of a CSV document.

        Args:
            raw_text: Full CSV text, optional header line.

        Returns:
            BatchResult with successes and failures in line order.

        Raises:
            BatchProcessingError: empty input, or no row classified.
        """
        t0 = time.perf_counter()
        parsed, failures, has_header = parse_csv_rows(raw_text, self.config)
        data_lines = len(parsed) + len(failures)

        if self.config.max_workers > 1 and len(parsed) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                outcomes = list(pool.map(self._classify_row, parsed))
        else:
            outcomes = [self._classify_row(item) for item in parsed]

        successes = [o for o in outcomes if isinstance(o, BatchRow)]
        failures = sorted(
            failures + [o for o in outcomes if isinstance(o, BatchFailure)],
            key=lambda f: f.line_number,
        )

        if self.prediction_log is not None:
            for row in successes:
                self.prediction_log.log_prediction(row.sample, row.result, row.processing_time_ms)

        elapsed_ms = (time.perf_counter() - t0) * 1000
        logger.info(
            f"CSV processing complete: {len(successes)} successful, "
            f"{len(failures)} failed in {elapsed_ms:.2f}ms"
        )
        if failures:
            logger.warning(f"Failed rows:\n{summarize_failures(failures, self.config.max_error_summary)}")

        if not successes:
            raise BatchProcessingError("No valid data rows found in CSV file", failures=failures)

        return BatchResult(
            successes=successes,
            failures=failures,
            stats=BatchStatistics.from_rows(successes, failures, self.classifier.classes),
            total_lines=data_lines,
            has_header=has_header,
            elapsed_ms=elapsed_ms,
        )
