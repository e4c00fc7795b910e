"""
Unit tests for CSV batch classification.

Tests:
  - Header detection and line numbering
  - Malformed row isolation
  - Whole-batch failures
  - Statistics and error summary
"""

import pytest

from satclass.core.exceptions import BatchProcessingError, ParseError
from satclass.ml.batch import (
    BatchFailure,
    BatchProcessor,
    parse_csv_rows,
    parse_row,
    summarize_failures,
)
from satclass.monitoring import PredictionLog
from satclass.utils.config_loader import BatchConfig


HEADER = "latitude,longitude,x_eci,y_eci,z_eci,vel_x,vel_y,vel_z"
ISS_ROW = "51.6,-122.0,6771.5,100.0,200.0,7.66,0.5,0.3"
SENTINEL_ROW = "80.0,45.0,7071.0,0.0,0.0,0.0,7.45,0.0"


# -----------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------

@pytest.fixture
def prediction_log():
    return PredictionLog()


@pytest.fixture
def processor(prediction_log):
    return BatchProcessor(prediction_log=prediction_log)


# -----------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------

class TestParseRow:
    def test_valid_row(self):
        sample = parse_row(2, ISS_ROW)
        assert sample.latitude == 51.6
        assert sample.velocity_z == 0.3

    def test_extra_columns_ignored(self):
        sample = parse_row(2, ISS_ROW + ",extra,99")
        assert sample.velocity_z == 0.3

    def test_too_few_columns(self):
        with pytest.raises(ParseError) as exc_info:
            parse_row(3, "1,2,3")
        assert exc_info.value.reason == "Not enough columns (found 3, need 8)"
        assert str(exc_info.value) == "Line 3: Not enough columns (found 3, need 8)"

    def test_reports_invalid_positions(self):
        with pytest.raises(ParseError) as exc_info:
            parse_row(4, "51.6,abc,6771.5,100.0,200.0,7.66,,0.3")
        assert exc_info.value.reason == "Invalid numeric values at positions 2, 7"

    def test_non_finite_is_invalid(self):
        with pytest.raises(ParseError) as exc_info:
            parse_row(5, "nan,-122.0,6771.5,100.0,200.0,7.66,0.5,inf")
        assert exc_info.value.reason == "Invalid numeric values at positions 1, 8"


class TestParseCsvRows:
    def test_header_detected(self):
        parsed, failures, has_header = parse_csv_rows(f"{HEADER}\n{ISS_ROW}")
        assert has_header
        assert [n for n, _ in parsed] == [2]
        assert failures == []

    def test_no_header(self):
        parsed, _, has_header = parse_csv_rows(f"{ISS_ROW}\n{SENTINEL_ROW}")
        assert not has_header
        assert [n for n, _ in parsed] == [1, 2]

    def test_line_numbers_count_blank_lines(self):
        text = f"{HEADER}\n{ISS_ROW}\n\nbad,row\n{SENTINEL_ROW}\n"
        parsed, failures, _ = parse_csv_rows(text)
        assert [n for n, _ in parsed] == [2, 5]
        assert failures[0].line_number == 4

    @pytest.mark.parametrize("newline", ["\r\n", "\r", "\n"])
    def test_line_endings(self, newline):
        text = newline.join([HEADER, ISS_ROW, SENTINEL_ROW])
        parsed, failures, _ = parse_csv_rows(text)
        assert len(parsed) == 2
        assert failures == []

    def test_empty_text(self):
        with pytest.raises(BatchProcessingError, match="CSV file is empty"):
            parse_csv_rows("  \n\n")

    def test_header_only(self):
        with pytest.raises(BatchProcessingError, match="No valid data rows"):
            parse_csv_rows(HEADER + "\n")


# -----------------------------------------------------------------------
# Processing
# -----------------------------------------------------------------------

class TestProcessBatch:
    def test_mixed_batch(self, processor):
        text = f"{HEADER}\n{ISS_ROW}\n1,2,3\n{SENTINEL_ROW}"
        result = processor.process_batch(text)

        assert [row.line_number for row in result.successes] == [2, 4]
        assert [row.result.predicted_class for row in result.successes] == ["ISS", "Sentinel1A"]
        assert len(result.failures) == 1
        assert result.failures[0].line_number == 3
        assert "Not enough columns" in result.failures[0].reason
        assert result.total_lines == 3
        assert result.has_header

    def test_validation_failure_is_row_failure(self, processor):
        text = f"{ISS_ROW}\n100.0,-122.0,6771.5,100.0,200.0,7.66,0.5,0.3"
        result = processor.process_batch(text)
        assert len(result.successes) == 1
        failure = result.failures[0]
        assert failure.line_number == 2
        assert failure.reason.startswith("Prediction failed - ")
        assert "Latitude out of range" in failure.reason
        assert "\n" not in failure.reason

    def test_all_rows_invalid(self, processor):
        with pytest.raises(BatchProcessingError) as exc_info:
            processor.process_batch(f"{HEADER}\n1,2\nx,y,z")
        assert [f.line_number for f in exc_info.value.failures] == [2, 3]

    def test_statistics(self, processor):
        text = "\n".join([ISS_ROW, ISS_ROW, SENTINEL_ROW, "bad"])
        stats = processor.process_batch(text).stats
        assert stats.success_count == 3
        assert stats.failure_count == 1
        assert stats.count_by_class == {"ISS": 2, "Sentinel1A": 1}
        assert 0.9 <= stats.mean_confidence <= 1.0
        assert stats.mean_altitude_km == pytest.approx((404.19 * 2 + 700.0) / 3, abs=0.01)

    def test_successes_logged(self, processor, prediction_log):
        processor.process_batch(f"{ISS_ROW}\nbad\n{SENTINEL_ROW}")
        assert len(prediction_log) == 2
        assert all(entry.success for entry in prediction_log.entries)

    def test_idempotent(self, processor):
        text = f"{HEADER}\n{ISS_ROW}\nbad\n{SENTINEL_ROW}"
        first = processor.process_batch(text)
        second = processor.process_batch(text)
        assert [r.result.to_dict() for r in first.successes] == [
            r.result.to_dict() for r in second.successes
        ]
        assert [str(f) for f in first.failures] == [str(f) for f in second.failures]
        assert first.stats == second.stats

    def test_threaded_keeps_order(self):
        rows = [ISS_ROW if i % 2 == 0 else SENTINEL_ROW for i in range(20)]
        processor = BatchProcessor(config=BatchConfig(max_workers=4))
        result = processor.process_batch("\n".join(rows))
        assert [row.line_number for row in result.successes] == list(range(1, 21))
        assert result.successes[1].result.predicted_class == "Sentinel1A"


class TestErrorSummary:
    def test_truncates_with_count(self):
        failures = [BatchFailure(i, "bad") for i in range(1, 9)]
        summary = summarize_failures(failures, limit=5)
        lines = summary.split("\n")
        assert len(lines) == 6
        assert lines[0] == "Line 1: bad"
        assert lines[-1] == "... and 3 more errors"

    def test_short_list_untouched(self):
        summary = summarize_failures([BatchFailure(2, "bad")], limit=5)
        assert summary == "Line 2: bad"

    def test_result_error_summary(self, processor):
        text = "\n".join([ISS_ROW] + ["bad"] * 7)
        result = processor.process_batch(text)
        assert result.error_summary(5).endswith("... and 2 more errors")
