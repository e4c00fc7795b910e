"""
Feature derivation and normalization for orbital state samples.
"""

from satclass.ml.features.orbital_features import (
    DerivedFeatures,
    OrbitalSample,
    SAMPLE_FIELDS,
    build_feature_vector,
    derive_features,
)
from satclass.ml.features.normalizer import FeatureNormalizer

__all__ = [
    "DerivedFeatures",
    "OrbitalSample",
    "SAMPLE_FIELDS",
    "build_feature_vector",
    "derive_features",
    "FeatureNormalizer",
]
