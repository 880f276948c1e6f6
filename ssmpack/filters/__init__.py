"""
Filtering algorithms.
"""

from .base import FilterResult, GaussianBelief, ParticleBelief, RecursiveBayesianFilter
from .kalman import KalmanFilter
from .particle import ParticleFilter
from .resampler import (
    BaseResampler,
    IdentityResampler,
    OrderedResampler,
    SystematicResampler,
    StratifiedResampler,
    ESSCriterion,
    AlwaysResample,
    NeverResample,
)

__all__ = [
    "FilterResult",
    "GaussianBelief",
    "ParticleBelief",
    "RecursiveBayesianFilter",
    "KalmanFilter",
    "ParticleFilter",
    "BaseResampler",
    "IdentityResampler",
    "OrderedResampler",
    "SystematicResampler",
    "StratifiedResampler",
    "ESSCriterion",
    "AlwaysResample",
    "NeverResample",
]
