"""
Classification endpoints: single sample and CSV batch.
"""

from __future__ import annotations

import asyncio
import logging
import time

from fastapi import APIRouter, Depends

from satclass.api.models import (
    BatchFailureResponse,
    BatchRequest,
    BatchResponse,
    BatchRowResponse,
    BatchStatsResponse,
    FeatureContributionResponse,
    PredictRequest,
    PredictionResponse,
)
from satclass.api.routes.auth import require_session
from satclass.core.exceptions import SatClassError
from satclass.ml.features import OrbitalSample

router = APIRouter(prefix="/api/predict", tags=["predict"], dependencies=[Depends(require_session)])
logger = logging.getLogger(__name__)


def _get(name: str):
    from satclass.api.main import app_state
    return app_state[name]


@router.post("", response_model=PredictionResponse)
async def predict(request: PredictRequest):
    """Classify one orbital state and explain the result."""
    classifier = _get("classifier")
    explainer = _get("explainer")
    prediction_log = _get("prediction_log")

    sample = OrbitalSample(**request.model_dump())
    t0 = time.perf_counter()
    try:
        result = classifier.classify(sample)
    except SatClassError as e:
        prediction_log.log_error(sample, e)
        raise
    elapsed_ms = (time.perf_counter() - t0) * 1000
    prediction_log.log_prediction(sample, result, elapsed_ms)

    delay = _get("config").api.result_delay_s
    if delay > 0:
        await asyncio.sleep(delay)

    return PredictionResponse(
        prediction=result.predicted_class,
        confidence=result.confidence,
        probabilities=result.probabilities,
        features=result.features,
        matched_rule=result.matched_rule,
        explanation=[
            FeatureContributionResponse(**c.to_dict()) for c in explainer.explain(result)
        ],
        explanation_text=explainer.text_explanation(result),
        reference_ranges=explainer.compare_to_reference_ranges(result),
        processing_time_ms=round(elapsed_ms, 3),
    )


@router.post("/batch", response_model=BatchResponse)
async def predict_batch(request: BatchRequest):
    """Classify every row of a CSV document; bad rows are reported per line."""
    processor = _get("batch_processor")
    result = processor.process_batch(request.csv_text)
    stats = result.stats
    return BatchResponse(
        successes=[
            BatchRowResponse(
                line_number=row.line_number,
                prediction=row.result.predicted_class,
                confidence=row.result.confidence,
                features=row.result.features,
            )
            for row in result.successes
        ],
        failures=[
            BatchFailureResponse(line_number=f.line_number, reason=f.reason)
            for f in result.failures
        ],
        stats=BatchStatsResponse(
            success_count=stats.success_count,
            failure_count=stats.failure_count,
            count_by_class=stats.count_by_class,
            mean_confidence=stats.mean_confidence,
            mean_altitude_km=stats.mean_altitude_km,
        ),
        error_summary=result.error_summary(processor.config.max_error_summary),
        elapsed_ms=round(result.elapsed_ms, 3),
    )
