"""
Feature-contribution explanations for satellite predictions.
"""

from satclass.ml.explain.feature_explainer import FeatureContribution, FeatureExplainer

__all__ = ["FeatureContribution", "FeatureExplainer"]
