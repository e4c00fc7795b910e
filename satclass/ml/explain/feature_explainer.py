"""
Human-Readable Prediction Explanations.

Ranks the model's static feature-importance table and renders the top
contributors against the sample's actual values. The ranking does not
depend on the sample or the predicted class: it is the global importance
of the exported Random Forest, not a per-prediction attribution.

Author: Space AI Team
"""

from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from satclass.ml.classifier import PredictionResult
from satclass.utils.config_loader import ClassifierConfig, default_classifier_config
from satclass.utils.logging_config import get_logger

logger = get_logger("explain")


_DISPLAY_NAMES = {
    "latitude": "Latitude",
    "longitude": "Longitude",
    "x_eci_km": "X Position (ECI)",
    "y_eci_km": "Y Position (ECI)",
    "z_eci_km": "Z Position (ECI)",
    "velocity_x": "X Velocity",
    "velocity_y": "Y Velocity",
    "velocity_z": "Z Velocity",
    "total_velocity": "Total Velocity",
    "radial_distance": "Radial Distance",
}

# feature -> (decimals, unit suffix)
_UNITS = {
    "latitude": (4, "°"),
    "longitude": (4, "°"),
    "x_eci_km": (2, " km"),
    "y_eci_km": (2, " km"),
    "z_eci_km": (2, " km"),
    "velocity_x": (4, " km/s"),
    "velocity_y": (4, " km/s"),
    "velocity_z": (4, " km/s"),
    "total_velocity": (4, " km/s"),
    "radial_distance": (2, " km"),
    "altitude": (2, " km"),
}

# Aliases accepted when looking up a feature's value
_VALUE_KEYS = {
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lon"),
    "x_eci_km": ("x_eci_km", "x_eci"),
    "y_eci_km": ("y_eci_km", "y_eci"),
    "z_eci_km": ("z_eci_km", "z_eci"),
    "velocity_x": ("velocity_x", "vel_x"),
    "velocity_y": ("velocity_y", "vel_y"),
    "velocity_z": ("velocity_z", "vel_z"),
    "total_velocity": ("total_velocity", "totalVelocity"),
    "radial_distance": ("radial_distance", "radialDistance"),
}

_CLASS_CONTEXT = {
    "ISS": (
        "The International Space Station operates in Low Earth Orbit (LEO) "
        "at approximately 408 km altitude with an inclination of 51.6°."
    ),
    "Sentinel1A": (
        "Sentinel-1A is a polar-orbiting satellite in a sun-synchronous orbit "
        "at approximately 693 km altitude with an inclination near 98°."
    ),
}


@dataclass
class FeatureContribution:
    """One row of an explanation."""
    feature: str             # display name
    feature_key: str
    importance: float
    importance_percent: str
    value: str               # formatted with unit, or "N/A"
    raw_value: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _numeric(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


class FeatureExplainer:
    """Generates feature contributions and text explanations."""

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config or default_classifier_config()
        self._ranked = sorted(
            self.config.feature_importance.items(),
            key=lambda item: item[1],
            reverse=True,
        )

    def explain(
        self,
        features: Union[PredictionResult, Mapping[str, Any]],
        predicted_class: Optional[str] = None,
        top_k: int = 5,
    ) -> List[FeatureContribution]:
        """
        Top contributing features for a prediction.

        Args:
            features: PredictionResult, or mapping of raw and derived values.
            predicted_class: Predicted label (unused by the ranking).
            top_k: Number of features to return.

        Returns:
            Contributions sorted by descending importance.
        """
        if isinstance(features, PredictionResult):
            predicted_class = predicted_class or features.predicted_class
            features = features.raw_features

        contributions = []
        for key, importance in self._ranked[:top_k]:
            raw = self._lookup(features, key)
            contributions.append(FeatureContribution(
                feature=self.format_feature_name(key),
                feature_key=key,
                importance=importance,
                importance_percent=f"{importance * 100:.1f}%",
                value=self.format_feature_value(key, raw),
                raw_value=_numeric(raw),
            ))

        logger.debug(
            f"Explained {predicted_class}: "
            + ", ".join(c.feature_key for c in contributions)
        )
        return contributions

    @staticmethod
    def _lookup(features: Mapping[str, Any], key: str) -> Any:
        for alias in _VALUE_KEYS.get(key, (key,)):
            if alias in features:
                return features[alias]
        return None

    @staticmethod
    def format_feature_name(feature_name: str) -> str:
        return _DISPLAY_NAMES.get(feature_name, feature_name.replace("_", " ").upper())

    @staticmethod
    def format_feature_value(feature_name: str, value: Any) -> str:
        """Format a value with its physical unit; 'N/A' when missing."""
        number = _numeric(value)
        if number is None:
            return "N/A"
        decimals, unit = _UNITS.get(feature_name, (4, ""))
        return f"{number:.{decimals}f}{unit}"

    @staticmethod
    def text_explanation(result: PredictionResult) -> str:
        """Plain-language summary of a prediction."""
        features = result.features
        parts = [
            f"The model predicts this is {result.predicted_class} "
            f"with {result.confidence * 100:.1f}% confidence.",
            "",
            "Key orbital parameters:",
            f"• Altitude: {features['altitude']} km above Earth",
            f"• Velocity: {features['totalVelocity']} km/s",
            f"• Position: {features['latitude']}° lat, {features['longitude']}° lon",
        ]
        context = _CLASS_CONTEXT.get(result.predicted_class)
        if context:
            parts.extend(["", context])
        return "\n".join(parts)

    @staticmethod
    def compare_to_reference_ranges(result: PredictionResult) -> Dict[str, str]:
        """Place altitude, velocity and latitude in broad orbital categories."""
        altitude = result.raw_features["altitude"]
        velocity = result.raw_features["total_velocity"]
        latitude = result.raw_features["latitude"]

        if altitude < 200:
            altitude_class = "Very Low Earth Orbit (VLEO)"
        elif altitude < 600:
            altitude_class = "Low Earth Orbit (LEO)"
        elif altitude < 2000:
            altitude_class = "Medium Earth Orbit (MEO)"
        else:
            altitude_class = "High Earth Orbit (HEO)"

        if velocity > 7.7:
            velocity_class = "High velocity (elliptical orbit likely)"
        elif velocity > 7.5:
            velocity_class = "Typical LEO velocity"
        else:
            velocity_class = "Lower velocity (higher altitude orbit)"

        if abs(latitude) > 80:
            orbital_type = "Polar orbit"
        elif abs(latitude) < 10:
            orbital_type = "Equatorial orbit"
        else:
            orbital_type = "Inclined orbit"

        return {
            "altitude_classification": altitude_class,
            "velocity_classification": velocity_class,
            "orbital_type": orbital_type,
        }
