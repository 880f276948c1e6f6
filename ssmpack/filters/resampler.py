"""
Resamplers and resampling criteria.

J. D. Hol, T. B. Schon and F. Gustafsson, "On Resampling Algorithms for
Particle Filters," Nonlinear Statistical Signal Processing Workshop, 2006.

A resampler is gated by a criterion, a predicate over the weight vector.
When the criterion does not fire, particles and weights are returned
unchanged. When it fires, M ordered positions are generated, the particle
set is replaced by the inverse-CDF selections at those positions and the
weights are reset to 1/M.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np
from numpy.random import Generator

from ..random import resolve
from ..utils.resampling import (
    systematic_positions,
    stratified_positions,
    inverse_cdf_select,
    effective_sample_size,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Criteria
# -----------------------------------------------------------------------------

class ESSCriterion:
    """Fire when the effective sample size falls below a threshold."""

    def __init__(self, threshold: float):
        """
        Args:
            threshold: Minimum number of effective samples
        """
        self.threshold = threshold

    @classmethod
    def from_fraction(cls, fraction: float, n_particles: int) -> "ESSCriterion":
        """Threshold as a fraction of the particle count (e.g. 0.5 * N)."""
        return cls(fraction * n_particles)

    def __call__(self, weights: np.ndarray) -> bool:
        return effective_sample_size(weights) < self.threshold

    def __repr__(self) -> str:
        return f"ESSCriterion(threshold={self.threshold})"


class AlwaysResample:
    def __call__(self, weights: np.ndarray) -> bool:
        return True


class NeverResample:
    def __call__(self, weights: np.ndarray) -> bool:
        return False


# -----------------------------------------------------------------------------
# Resamplers
# -----------------------------------------------------------------------------

class BaseResampler(ABC):
    """Base class for resamplers."""

    @abstractmethod
    def resample(
        self,
        particles: np.ndarray,
        weights: np.ndarray,
        rng: Optional[Generator] = None,
    ) -> Tuple[np.ndarray, np.ndarray, bool]:
        """
        Resample a weighted particle set.

        Args:
            particles: [nx, M] Particles, one per column
            weights: [M] Normalized weights
            rng: Optional generator

        Returns:
            particles: [nx, M] Resulting particles
            weights: [M] Resulting weights
            fired: Whether resampling took place
        """

    def __call__(self, particles, weights, rng: Optional[Generator] = None):
        particles, weights, _ = self.resample(particles, weights, rng)
        return particles, weights


class IdentityResampler(BaseResampler):
    """Returns the same particles and weights."""

    def resample(self, particles, weights, rng=None):
        return particles, weights, False


class OrderedResampler(BaseResampler):
    """
    Inverse-CDF resampling at generated ordered positions, gated by a criterion.

    Subclasses implement ordered_numbers().
    """

    def __init__(self, criterion=None):
        """
        Args:
            criterion: Callable weights -> bool (default: always resample)
        """
        self.criterion = AlwaysResample() if criterion is None else criterion

    @abstractmethod
    def ordered_numbers(self, n: int, rng: Generator) -> np.ndarray:
        """Generate n increasing positions in [0, 1)."""

    def resample(self, particles, weights, rng=None):
        weights = np.asarray(weights)
        if not self.criterion(weights):
            return particles, weights, False

        n = weights.shape[0]
        u = self.ordered_numbers(n, resolve(rng))
        indices = inverse_cdf_select(weights, u)
        logger.debug("Resampled %d particles (ESS %.1f)", n, effective_sample_size(weights))
        return particles[:, indices], np.full(n, 1.0 / n, dtype=weights.dtype), True


class SystematicResampler(OrderedResampler):
    """Systematic resampling: one uniform offset, evenly spaced positions."""

    def ordered_numbers(self, n, rng):
        return systematic_positions(n, rng)

    def __repr__(self) -> str:
        return f"SystematicResampler({self.criterion!r})"


class StratifiedResampler(OrderedResampler):
    """Stratified resampling: one uniform draw per stratum [k/n, (k+1)/n)."""

    def ordered_numbers(self, n, rng):
        return stratified_positions(n, rng)

    def __repr__(self) -> str:
        return f"StratifiedResampler({self.criterion!r})"
