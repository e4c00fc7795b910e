from satclass.monitoring.prediction_log import EXPORT_HEADERS, LogEntry, PredictionLog

__all__ = ["EXPORT_HEADERS", "LogEntry", "PredictionLog"]
