"""
Independent-component Student-t distribution.

Each component i is location[i] + scale[i] * t_nu, with a shared number of
degrees of freedom nu. The parameter is the location vector, so a parameter
map only has to produce a mean; scales and nu are fixed at construction.
"""

import numpy as np
from numpy.random import Generator
from scipy import stats
from typing import Optional

from .base import Distribution, VariableSpec, ParameterSpec
from ..config import get_dtype
from ..exceptions import PreconditionError
from ..random import resolve


class StudentT(Distribution):
    """
    Heavy-tailed noise model, e.g. for outlier-prone sensors.

    Subclasses may override residual() to measure distances on a manifold
    (wrapped angles).
    """

    def __init__(self, location, scale, df: float = 2.0):
        """
        Args:
            location: [n] Location vector
            scale: [n] or scalar Per-component scale
            df: Degrees of freedom nu
        """
        location = np.atleast_1d(np.asarray(location, dtype=get_dtype()))
        self._dim = location.shape[0]
        scale = np.broadcast_to(np.asarray(scale, dtype=get_dtype()), (self._dim,)).copy()
        if np.any(scale <= 0) or not df > 0:
            raise ValueError("Student-t scale and degrees of freedom must be positive")
        self.scale = scale
        self.df = float(df)
        self._location = location

    @property
    def dim(self) -> int:
        return self._dim

    @property
    def location(self) -> np.ndarray:
        return self._location

    @property
    def variable_spec(self) -> VariableSpec:
        return VariableSpec("real", self._dim)

    @property
    def parameter_spec(self) -> ParameterSpec:
        return ParameterSpec("student_t", self._dim)

    def residual(self, x: np.ndarray) -> np.ndarray:
        return x - self._location

    def random(self, *, rng: Optional[Generator] = None) -> np.ndarray:
        noise = stats.t.rvs(df=self.df, scale=self.scale, size=self._dim, random_state=resolve(rng))
        return self._location + noise

    def likelihood(self, x) -> float:
        return float(np.exp(self.log_likelihood(x)))

    def log_likelihood(self, x) -> float:
        x = np.atleast_1d(np.asarray(x, dtype=self._location.dtype))
        if x.shape != (self._dim,):
            raise PreconditionError(
                f"Student-t of dimension {self._dim} evaluated at shape {x.shape}"
            )
        return float(np.sum(stats.t.logpdf(self.residual(x), df=self.df, scale=self.scale)))

    def parameterize(self, parameters) -> "StudentT":
        """
        Args:
            parameters: [n] location vector

        Returns:
            self
        """
        location = np.atleast_1d(np.asarray(parameters, dtype=get_dtype()))
        if location.shape != (self._dim,):
            raise ValueError(
                f"Student-t of dimension {self._dim} given location of shape {location.shape}"
            )
        self._location = location
        return self

    def __repr__(self) -> str:
        return f"StudentT(dim={self._dim}, df={self.df})"
