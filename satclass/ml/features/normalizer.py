"""
Z-score normalization with fixed StandardScaler parameters.

The normalized vector is attached to every prediction but does not take
part in the rule-based decision.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from satclass.core.exceptions import DimensionMismatchError
from satclass.utils.config_loader import ScalerParams


class FeatureNormalizer:
    """Applies (x - mean) / std elementwise."""

    def __init__(self, scaler: Optional[ScalerParams] = None):
        scaler = scaler or ScalerParams()
        self.mean = np.asarray(scaler.mean, dtype=np.float64)
        self.std = np.asarray(scaler.std, dtype=np.float64)

    @property
    def n_features(self) -> int:
        return len(self.mean)

    def transform(self, features: Sequence[float]) -> np.ndarray:
        vector = np.asarray(features, dtype=np.float64)
        if vector.shape != self.mean.shape:
            raise DimensionMismatchError(expected=self.n_features, actual=vector.size)
        return (vector - self.mean) / self.std

    def inverse_transform(self, normalized: Sequence[float]) -> np.ndarray:
        vector = np.asarray(normalized, dtype=np.float64)
        if vector.shape != self.mean.shape:
            raise DimensionMismatchError(expected=self.n_features, actual=vector.size)
        return vector * self.std + self.mean
