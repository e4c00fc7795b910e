"""
In-memory prediction log for one session.

Append-only while a session runs; ``clear()`` resets entries and metrics.
A single writer is assumed, so no locking is done.
"""

from __future__ import annotations

import csv
import io
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from satclass.ml.classifier import PredictionResult
from satclass.ml.features import OrbitalSample
from satclass.utils.logging_config import get_logger

logger = get_logger("monitoring")

EXPORT_HEADERS = [
    "Timestamp",
    "Prediction",
    "Confidence",
    "Latitude",
    "Longitude",
    "Altitude_km",
    "Velocity_km_s",
    "Processing_Time_ms",
]


@dataclass
class LogEntry:
    """One logged prediction attempt."""
    timestamp: str
    sample: Optional[OrbitalSample]
    result: Optional[PredictionResult] = None
    processing_time_ms: Optional[float] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "input": self.sample.to_dict() if self.sample is not None else None,
            "output": self.result.to_dict() if self.result is not None else None,
            "processing_time_ms": self.processing_time_ms,
            "error": self.error,
            "success": self.success,
        }


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class PredictionLog:
    """Session-scoped prediction history with aggregate metrics."""

    def __init__(
        self,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.max_entries = max_entries
        self._clock = clock
        self._entries: List[LogEntry] = []
        self.session_start = self._clock()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def _append(self, entry: LogEntry) -> LogEntry:
        self._entries.append(entry)
        if self.max_entries is not None and len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]
        return entry

    def log_prediction(
        self,
        sample: OrbitalSample,
        result: PredictionResult,
        processing_time_ms: float,
    ) -> LogEntry:
        return self._append(LogEntry(
            timestamp=_utc_now_iso(),
            sample=sample,
            result=result,
            processing_time_ms=round(processing_time_ms, 2),
        ))

    def log_error(self, sample: Optional[OrbitalSample], error: Exception) -> LogEntry:
        message = getattr(error, "message", str(error))
        logger.info(f"Logged failed prediction: {message}")
        return self._append(LogEntry(
            timestamp=_utc_now_iso(),
            sample=sample,
            error=message,
        ))

    def history(self, limit: int = 100) -> List[LogEntry]:
        """Most recent entries, oldest first."""
        if limit <= 0:
            return []
        return self._entries[-limit:]

    def stats(self) -> Dict[str, Any]:
        successful = [e for e in self._entries if e.success]
        total = len(self._entries)
        times = np.array([e.processing_time_ms for e in successful], dtype=np.float64)

        by_class: Dict[str, int] = {}
        for entry in successful:
            name = entry.result.predicted_class
            by_class[name] = by_class.get(name, 0) + 1

        duration_s = int(self._clock() - self.session_start)
        return {
            "total_predictions": total,
            "successful_predictions": len(successful),
            "failed_predictions": total - len(successful),
            "avg_processing_time_ms": float(times.mean()) if times.size else 0.0,
            "min_processing_time_ms": float(times.min()) if times.size else 0.0,
            "max_processing_time_ms": float(times.max()) if times.size else 0.0,
            "predictions_by_class": by_class,
            "session_duration_s": duration_s,
            "predictions_per_minute": (total / duration_s) * 60 if duration_s > 0 else 0.0,
            "success_rate": (len(successful) / total) * 100 if total else 100.0,
        }

    def clear(self):
        """Drop all entries and restart the session clock."""
        count = len(self._entries)
        self._entries = []
        self.session_start = self._clock()
        logger.info(f"Prediction log cleared ({count} entries)")

    def export_csv(self) -> str:
        """Successful predictions as CSV, one row per entry."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_HEADERS)
        for entry in self._entries:
            if not entry.success:
                continue
            result = entry.result
            writer.writerow([
                entry.timestamp,
                result.predicted_class,
                f"{result.confidence:.4f}",
                entry.sample.latitude,
                entry.sample.longitude,
                result.features.get("altitude", "N/A"),
                result.features.get("totalVelocity", "N/A"),
                "N/A" if entry.processing_time_ms is None else f"{entry.processing_time_ms:.2f}",
            ])
        return buffer.getvalue().rstrip("\n")
