"""
Rule-based satellite identity classification.
"""

from satclass.ml.classifier.rule_classifier import (
    PredictionResult,
    RuleClassifier,
    validate_input,
)

__all__ = [
    "PredictionResult",
    "RuleClassifier",
    "validate_input",
]
