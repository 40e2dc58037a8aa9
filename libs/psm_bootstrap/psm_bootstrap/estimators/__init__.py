"""Propensity model, matching, effect estimation and bootstrap estimators."""

from .bootstrap import ComplexBootstrap, SimpleBootstrap
from .effect import estimate_effect, estimate_from_pairs
from .matching import NearestNeighborMatcher, match_nearest_neighbor
from .pipeline import MatchingPipeline
from .propensity_model import LogisticPropensityModel
from .propensity_score import PropensityScoreMatchingEstimator

__all__ = [
    "ComplexBootstrap",
    "LogisticPropensityModel",
    "MatchingPipeline",
    "NearestNeighborMatcher",
    "PropensityScoreMatchingEstimator",
    "SimpleBootstrap",
    "estimate_effect",
    "estimate_from_pairs",
    "match_nearest_neighbor",
]
