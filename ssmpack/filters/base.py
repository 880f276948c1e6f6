"""
Filter base classes, beliefs and result containers.
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence

from ..exceptions import PreconditionError
from ..utils.resampling import effective_sample_size


# -----------------------------------------------------------------------------
# Beliefs
# -----------------------------------------------------------------------------

class GaussianBelief(NamedTuple):
    """
    Gaussian posterior summary.

    Attributes:
        mean: [nx] State mean
        covariance: [nx, nx] State covariance
    """
    mean: np.ndarray
    covariance: np.ndarray


class ParticleBelief(NamedTuple):
    """
    Weighted particle posterior.

    Attributes:
        particles: [nx, M] One particle per column
        weights: [M] Normalized weights
    """
    particles: np.ndarray
    weights: np.ndarray

    def mean(self) -> np.ndarray:
        """[nx] Weighted particle mean."""
        return self.particles @ self.weights

    def covariance(self) -> np.ndarray:
        """[nx, nx] Weighted particle covariance."""
        diff = self.particles - self.mean()[:, np.newaxis]
        cov = (diff * self.weights) @ diff.T
        return 0.5 * (cov + cov.T)

    def ess(self) -> float:
        """Effective sample size of the weights."""
        return effective_sample_size(self.weights)


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

@dataclass
class FilterResult:
    """
    Container for filter outputs.
    
    Stacks a belief trajectory from any filter type.
    
    Attributes:
        means: [T+1, nx] Filtered state means (m_0, m_1, ..., m_T)
        covariances: [T+1, nx, nx] Filtered state covariances
        
        # Particle filter specific
        particles: [T+1, nx, M] Particle history (optional)
        weights: [T+1, M] Weight history (optional)
        ess: [T+1] Effective sample size at each step (optional)
    """
    means: np.ndarray
    covariances: Optional[np.ndarray] = None
    
    # Particle filter outputs
    particles: Optional[np.ndarray] = None
    weights: Optional[np.ndarray] = None
    ess: Optional[np.ndarray] = None

    @classmethod
    def from_beliefs(cls, beliefs: Sequence) -> "FilterResult":
        """
        Stack a belief trajectory as returned by RecursiveBayesianFilter.filter().

        Args:
            beliefs: Sequence of GaussianBelief or ParticleBelief

        Returns:
            FilterResult
        """
        if len(beliefs) == 0:
            raise ValueError("Empty belief trajectory")
        if isinstance(beliefs[0], ParticleBelief):
            return cls(
                means=np.stack([b.mean() for b in beliefs]),
                covariances=np.stack([b.covariance() for b in beliefs]),
                particles=np.stack([b.particles for b in beliefs]),
                weights=np.stack([b.weights for b in beliefs]),
                ess=np.array([b.ess() for b in beliefs]),
            )
        return cls(
            means=np.stack([b.mean for b in beliefs]),
            covariances=np.stack([b.covariance for b in beliefs]),
        )
    
    @property
    def T(self) -> int:
        """Number of time steps (observations)."""
        return self.means.shape[0] - 1
    
    @property
    def state_dim(self) -> int:
        """State dimension."""
        return self.means.shape[1]
    
    def rmse(self, true_states: np.ndarray) -> np.ndarray:
        """
        Compute per-timestep RMSE against true states.
        
        Args:
            true_states: [T+1, nx] True state trajectory
            
        Returns:
            rmse: [T+1] RMSE at each time step
        """
        squared_error = (self.means - true_states) ** 2
        return np.sqrt(np.mean(squared_error, axis=1))
    
    def mse(self, true_states: np.ndarray) -> np.ndarray:
        """
        Compute per-timestep MSE against true states.
        
        Args:
            true_states: [T+1, nx] True state trajectory
            
        Returns:
            mse: [T+1] MSE at each time step
        """
        squared_error = (self.means - true_states) ** 2
        return np.mean(squared_error, axis=1)
    
    def mean_rmse(self, true_states: np.ndarray) -> float:
        """Average RMSE over all time steps."""
        return np.mean(self.rmse(true_states))
    
    def average_ess(self) -> float:
        """Return average ESS if available."""
        if self.ess is None:
            return np.nan
        return np.mean(self.ess)


# -----------------------------------------------------------------------------
# Recursive Bayesian filter loop
# -----------------------------------------------------------------------------

class RecursiveBayesianFilter(ABC):
    """
    Shared predict/correct driver.

    Subclasses implement initialize(), predict(*controls) and
    correct(measurement, *controls); step() and filter() run the recursion.
    """

    @abstractmethod
    def initialize(self):
        """Reset to the prior and return the initial belief."""

    @abstractmethod
    def predict(self, *controls):
        """Propagate the belief through the state transition."""

    @abstractmethod
    def correct(self, measurement, *controls):
        """Condition the predicted belief on a measurement and return it."""

    def step(self, measurement, *controls, dynamic_controls: Sequence = ()):
        """
        One filtering recursion: predict(*dynamic_controls), then correct(measurement, *controls).

        Args:
            measurement: Measurement z_t
            *controls: Control variables of the measurement layer
            dynamic_controls: Control variables of the state transition

        Returns:
            The corrected belief
        """
        self.predict(*dynamic_controls)
        return self.correct(measurement, *controls)

    def filter(self, measurements: Sequence, controls: Optional[Sequence] = None) -> List:
        """
        Run the filter over a measurement sequence.

        Args:
            measurements: [T] measurements z_1, ..., z_T (any sequence; rows of an array)
            controls: Optional [T] sequence of (dynamic_controls, measurement_controls)
                pairs, one per step

        Returns:
            List of T+1 beliefs; index 0 is the initial belief
        """
        if controls is not None and len(controls) != len(measurements):
            raise PreconditionError(
                f"Got {len(controls)} control entries for {len(measurements)} measurements"
            )

        beliefs = [self.initialize()]
        for t, measurement in enumerate(measurements):
            if controls is None:
                beliefs.append(self.step(measurement))
            else:
                dynamic, measurement_controls = controls[t]
                beliefs.append(
                    self.step(measurement, *measurement_controls, dynamic_controls=dynamic)
                )
        return beliefs
