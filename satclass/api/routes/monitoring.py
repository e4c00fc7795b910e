"""
Monitoring endpoints: session prediction history, stats, CSV export.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from satclass.api.models import PredictionLogResponse, PredictionStatsResponse
from satclass.api.routes.auth import require_session

router = APIRouter(
    prefix="/api/monitoring",
    tags=["monitoring"],
    dependencies=[Depends(require_session)],
)
logger = logging.getLogger(__name__)


def _get_prediction_log():
    from satclass.api.main import app_state
    return app_state["prediction_log"]


@router.get("/history", response_model=list[PredictionLogResponse])
async def prediction_history(limit: int = Query(100, ge=1, le=1000)):
    """Most recent logged predictions, oldest first."""
    entries = _get_prediction_log().history(limit=limit)
    return [
        PredictionLogResponse(
            timestamp=e.timestamp,
            success=e.success,
            prediction=e.result.predicted_class if e.result else None,
            confidence=e.result.confidence if e.result else None,
            latitude=e.sample.latitude if e.sample else None,
            longitude=e.sample.longitude if e.sample else None,
            altitude_km=e.result.altitude_km if e.result else None,
            processing_time_ms=e.processing_time_ms,
            error=e.error,
        )
        for e in entries
    ]


@router.get("/stats", response_model=PredictionStatsResponse)
async def prediction_stats():
    """Aggregate statistics over the session log."""
    return PredictionStatsResponse(**_get_prediction_log().stats())


@router.get("/export", response_class=PlainTextResponse)
async def export_history():
    """Prediction log as a CSV download."""
    stamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
    return PlainTextResponse(
        _get_prediction_log().export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="satellite_predictions_{stamp}.csv"'},
    )


@router.delete("/history")
async def clear_history():
    prediction_log = _get_prediction_log()
    cleared = len(prediction_log)
    prediction_log.clear()
    logger.info("Cleared %d prediction log entries", cleared)
    return {"cleared": cleared}
