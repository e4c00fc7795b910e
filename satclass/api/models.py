"""
Pydantic request/response schemas for the satellite classification API.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel


# --- Auth models ---

class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""
    remember_me: bool = False


class LoginResponse(BaseModel):
    success: bool
    message: str
    user: Optional[str] = None


class SessionResponse(BaseModel):
    username: str
    login_time: str


# --- Prediction models ---

class PredictRequest(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    x_eci_km: Optional[float] = None
    y_eci_km: Optional[float] = None
    z_eci_km: Optional[float] = None
    velocity_x: Optional[float] = None
    velocity_y: Optional[float] = None
    velocity_z: Optional[float] = None


class FeatureContributionResponse(BaseModel):
    feature: str
    feature_key: str
    importance: float
    importance_percent: str
    value: str
    raw_value: Optional[float] = None


class PredictionResponse(BaseModel):
    prediction: str
    confidence: float
    probabilities: Dict[str, float]
    features: Dict[str, str]
    matched_rule: bool
    explanation: List[FeatureContributionResponse]
    explanation_text: str
    reference_ranges: Dict[str, str]
    processing_time_ms: float


class BatchRequest(BaseModel):
    csv_text: str


class BatchRowResponse(BaseModel):
    line_number: int
    prediction: str
    confidence: float
    features: Dict[str, str]


class BatchFailureResponse(BaseModel):
    line_number: int
    reason: str


class BatchStatsResponse(BaseModel):
    success_count: int
    failure_count: int
    count_by_class: Dict[str, int]
    mean_confidence: float
    mean_altitude_km: float


class BatchResponse(BaseModel):
    successes: List[BatchRowResponse]
    failures: List[BatchFailureResponse]
    stats: BatchStatsResponse
    error_summary: str
    elapsed_ms: float


# --- Monitoring models ---

class PredictionLogResponse(BaseModel):
    timestamp: str
    success: bool
    prediction: Optional[str] = None
    confidence: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude_km: Optional[float] = None
    processing_time_ms: Optional[float] = None
    error: Optional[str] = None


class PredictionStatsResponse(BaseModel):
    total_predictions: int
    successful_predictions: int
    failed_predictions: int
    avg_processing_time_ms: float
    min_processing_time_ms: float
    max_processing_time_ms: float
    predictions_by_class: Dict[str, int]
    session_duration_s: int
    predictions_per_minute: float
    success_rate: float
