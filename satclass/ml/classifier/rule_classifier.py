"""
Rule-Based Satellite Classifier.

Identifies a satellite (ISS vs Sentinel-1A) from a single orbital state
using per-class range tables extracted from a trained Random Forest.

Pipeline:
    1. Validate the sample, collecting every violation
    2. Derive |v|, |r|, altitude and circular-orbit velocity
    3. Normalize the 10-element feature vector (informational)
    4. Match classes in declaration order; first full match wins
    5. No match: single altitude threshold with fixed confidence

Author: Space AI Team
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from satclass.core.exceptions import SatClassError, UnknownClassError, ValidationError
from satclass.ml.features import (
    DerivedFeatures,
    FeatureNormalizer,
    OrbitalSample,
    SAMPLE_FIELDS,
    build_feature_vector,
    derive_features,
)
from satclass.utils.config_loader import (
    ClassifierConfig,
    ClassRule,
    ValidationConfig,
    default_classifier_config,
)
from satclass.utils.logging_config import get_logger

logger = get_logger("classification")

SampleLike = Union[OrbitalSample, Mapping[str, Any]]


# -----------------------------------------------------------------------
# Result dataclass
# -----------------------------------------------------------------------

@dataclass
class PredictionResult:
    """Output of the rule classifier."""
    predicted_class: str
    confidence: float                      # 0.5-1, heuristic, not calibrated
    probabilities: Dict[str, float]        # two-class scheme, see classify()
    features: Dict[str, str]               # display strings
    raw_features: Dict[str, float]         # sample fields + derived features
    normalized_features: List[float] = field(default_factory=list)
    matched_rule: bool = False

    @property
    def altitude_km(self) -> float:
        return self.raw_features["altitude"]

    @property
    def total_velocity(self) -> float:
        return self.raw_features["total_velocity"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prediction": self.predicted_class,
            "confidence": self.confidence,
            "probabilities": dict(self.probabilities),
            "features": dict(self.features),
            "raw_features": dict(self.raw_features),
            "normalized_features": list(self.normalized_features),
            "matched_rule": self.matched_rule,
        }


# -----------------------------------------------------------------------
# Input validation
# -----------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_input(
    sample: OrbitalSample,
    limits: Optional[ValidationConfig] = None,
) -> List[str]:
    """
    Check a sample against the input rules.

    Returns:
        List of human-readable violations, empty when the sample is valid.
    """
    limits = limits or ValidationConfig()
    errors: List[str] = []

    for name in SAMPLE_FIELDS:
        value = getattr(sample, name)
        if value is None:
            errors.append(f"Missing required field: {name}")
        elif not _is_number(value):
            errors.append(f"Invalid numeric value for: {name}")

    lat_lo, lat_hi = limits.latitude_range
    if _is_number(sample.latitude) and not lat_lo <= sample.latitude <= lat_hi:
        errors.append(
            f"Latitude out of range: {sample.latitude}° (valid: {lat_lo:g}° to {lat_hi:+g}°)"
        )

    lon_lo, lon_hi = limits.longitude_range
    if _is_number(sample.longitude) and not lon_lo <= sample.longitude <= lon_hi:
        errors.append(
            f"Longitude out of range: {sample.longitude}° (valid: {lon_lo:g}° to {lon_hi:+g}°)"
        )

    vmax = limits.max_velocity_component_km_s
    for axis in ("x", "y", "z"):
        value = getattr(sample, f"velocity_{axis}")
        if _is_number(value) and abs(value) > vmax:
            errors.append(
                f"Velocity {axis.upper()} seems unrealistic: {value} km/s (limit: ±{vmax:g} km/s)"
            )

    position = (sample.x_eci_km, sample.y_eci_km, sample.z_eci_km)
    if all(_is_number(p) for p in position):
        magnitude = math.sqrt(sum(p * p for p in position))
        if magnitude < limits.min_radial_distance_km:
            errors.append(
                f"ECI position inside Earth! Magnitude: {magnitude:.2f} km "
                f"(min: {limits.min_radial_distance_km:g} km)"
            )
        if magnitude > limits.max_radial_distance_km:
            errors.append(
                f"ECI position too far from Earth: {magnitude:.2f} km "
                f"(max: {limits.max_radial_distance_km:g} km)"
            )

    return errors


# -----------------------------------------------------------------------
# Rule Classifier
# -----------------------------------------------------------------------

def _in_range(value: float, bounds: Sequence[float]) -> bool:
    return bounds[0] <= value <= bounds[1]


def _range_score(value: float, bounds: Sequence[float]) -> float:
    """Linear falloff from the range center, 1 at center, 0 at one width away."""
    center = (bounds[0] + bounds[1]) / 2
    width = bounds[1] - bounds[0]
    if width <= 0:
        return 1.0 if value == center else 0.0
    return 1.0 - min(abs(value - center) / width, 1.0)


class RuleClassifier:
    """
    Classifies satellites from orbital state with fixed range rules.

    Classes are tested in the order they are declared in the configuration,
    so a sample inside two rule sets resolves to the first one (ISS).
    """

    def __init__(
        self,
        config: Optional[ClassifierConfig] = None,
        validation: Optional[ValidationConfig] = None,
    ):
        self.config = config or default_classifier_config()
        self.validation = validation or ValidationConfig()
        self.normalizer = FeatureNormalizer(self.config.scaler)
        if len(self.config.classes) > 2:
            logger.warning(
                f"{len(self.config.classes)} classes configured; per-class "
                "probabilities use the two-class scheme and will not sum to 1"
            )

    @property
    def classes(self) -> List[str]:
        return self.config.classes

    def _rule(self, class_name: str) -> ClassRule:
        try:
            return self.config.rules[class_name]
        except KeyError:
            raise UnknownClassError(class_name) from None

    def matches_rules(self, derived: DerivedFeatures, class_name: str) -> bool:
        """True when altitude, |v| and |r| all fall inside the class ranges."""
        rule = self._rule(class_name)
        return (
            _in_range(derived.altitude, rule.altitude_range)
            and _in_range(derived.total_velocity, rule.velocity_range)
            and _in_range(derived.radial_distance, rule.radial_distance_range)
        )

    def rule_confidence(self, derived: DerivedFeatures, class_name: str) -> float:
        """Weighted closeness to the class range centers, floored on a match."""
        rule = self._rule(class_name)
        altitude_score = _range_score(derived.altitude, rule.altitude_range)
        velocity_score = _range_score(derived.total_velocity, rule.velocity_range)

        confidence = (
            altitude_score * self.config.altitude_weight
            + velocity_score * self.config.velocity_weight
        )

        if self.matches_rules(derived, class_name):
            return max(confidence, self.config.match_confidence_floor)
        return max(confidence, self.config.confidence_floor)

    def classify(self, sample: SampleLike) -> PredictionResult:
        """
        Classify one orbital sample.

        Args:
            sample: OrbitalSample or mapping with the 8 input fields.

        Returns:
            PredictionResult for the sample.

        Raises:
            ValidationError: listing every violated input rule.
            DegenerateInputError: if derived features are not finite.
        """
        if not isinstance(sample, OrbitalSample):
            sample = OrbitalSample.from_dict(sample)

        errors = validate_input(sample, self.validation)
        if errors:
            logger.debug(f"Validation failed: {errors}")
            raise ValidationError(errors)

        derived = derive_features(sample, self.config.constants)
        normalized = self.normalizer.transform(build_feature_vector(sample, derived))

        prediction: Optional[str] = None
        confidence = 0.0
        for class_name in self.classes:
            if self.matches_rules(derived, class_name):
                prediction = class_name
                confidence = self.rule_confidence(derived, class_name)
                break

        matched = prediction is not None
        if not matched:
            # Fallback on altitude alone
            first, second = self.classes[0], self.classes[1]
            prediction = first if derived.altitude < self.config.fallback_altitude_km else second
            confidence = self.config.fallback_confidence

        # Exact only for two classes
        probabilities = {
            name: confidence if name == prediction else 1.0 - confidence
            for name in self.classes
        }

        logger.debug(
            f"Classified as {prediction} ({confidence:.3f}, "
            f"{'rule match' if matched else 'fallback'}) at altitude {derived.altitude:.2f} km"
        )

        return PredictionResult(
            predicted_class=prediction,
            confidence=confidence,
            probabilities=probabilities,
            features={
                "latitude": f"{sample.latitude:.4f}",
                "longitude": f"{sample.longitude:.4f}",
                "altitude": f"{derived.altitude:.2f}",
                "totalVelocity": f"{derived.total_velocity:.4f}",
                "radialDistance": f"{derived.radial_distance:.2f}",
                "orbitalVelocity": f"{derived.orbital_velocity:.4f}",
            },
            raw_features={**sample.to_dict(), **derived.to_dict()},
            normalized_features=normalized.tolist(),
            matched_rule=matched,
        )

    def classify_many(self, samples: Sequence[SampleLike]) -> List[Dict[str, Any]]:
        """
        Classify several samples, isolating failures per item.

        Returns:
            One dict per input with index, input, success and either
            result or error.
        """
        outcomes = []
        for index, sample in enumerate(samples):
            try:
                outcomes.append({
                    "index": index,
                    "input": sample,
                    "result": self.classify(sample),
                    "success": True,
                })
            except SatClassError as e:
                outcomes.append({
                    "index": index,
                    "input": sample,
                    "error": e.message,
                    "success": False,
                })
        return outcomes
