"""
Multivariate Gaussian distribution.

Parameters are a (mean, covariance) tuple. The Cholesky factor of the
covariance is computed on every re-parameterization and reused for both
sampling (x = mean + L z) and density evaluation (triangular solve).
Mean and covariance are stored as read-only copies so the cached factor
always matches what the accessors report.
"""

import numpy as np
from numpy.random import Generator
from scipy.linalg import solve_triangular
from typing import Optional, Tuple

from .base import Distribution, VariableSpec, ParameterSpec
from ..config import get_dtype
from ..exceptions import NumericalError, PreconditionError
from ..random import resolve


class Gaussian(Distribution):
    """
    Multivariate normal N(mean, covariance).

    The dimension is fixed at construction; parameterize() only accepts
    parameters of the same dimension.
    """

    def __init__(self, mean, covariance):
        """
        Args:
            mean: [n] Mean vector
            covariance: [n, n] Symmetric positive-definite covariance
        """
        mean = np.atleast_1d(np.asarray(mean, dtype=get_dtype()))
        if mean.ndim != 1:
            raise ValueError(f"Gaussian mean must be a vector, got shape {mean.shape}")
        self._dim = mean.shape[0]
        self._mean = None
        self._covariance = None
        self._covariance_source = None
        self._chol = None
        self._log_norm = None
        self._set(mean, covariance)

    @classmethod
    def standard(cls, dim: int) -> "Gaussian":
        """Zero-mean, identity-covariance Gaussian of dimension dim."""
        return cls(np.zeros(dim), np.eye(dim))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def dim(self) -> int:
        return self._dim

    @property
    def mean(self) -> np.ndarray:
        return self._mean

    @property
    def covariance(self) -> np.ndarray:
        return self._covariance

    @property
    def variable_spec(self) -> VariableSpec:
        return VariableSpec("real", self._dim)

    @property
    def parameter_spec(self) -> ParameterSpec:
        return ParameterSpec("gaussian", self._dim)

    # -------------------------------------------------------------------------
    # Distribution interface
    # -------------------------------------------------------------------------

    def random(self, *, rng: Optional[Generator] = None) -> np.ndarray:
        """
        Draw one sample.

        Args:
            rng: Optional generator (thread-scoped generator if None)

        Returns:
            x: [n] sample
        """
        z = resolve(rng).standard_normal(self._dim)
        return self._mean + self._chol @ z

    def likelihood(self, x) -> float:
        return float(np.exp(self.log_likelihood(x)))

    def log_likelihood(self, x) -> float:
        """
        Log density at x.

        Args:
            x: [n] point

        Returns:
            log N(x; mean, covariance)
        """
        x = np.atleast_1d(np.asarray(x, dtype=self._mean.dtype))
        if x.shape != (self._dim,):
            raise PreconditionError(
                f"Gaussian of dimension {self._dim} evaluated at shape {x.shape}"
            )
        solved = solve_triangular(self._chol, x - self._mean, lower=True)
        return float(self._log_norm - 0.5 * np.dot(solved, solved))

    def parameterize(self, parameters: Tuple[np.ndarray, np.ndarray]) -> "Gaussian":
        """
        Args:
            parameters: (mean [n], covariance [n, n])

        Returns:
            self
        """
        mean, covariance = parameters
        self._set(np.atleast_1d(np.asarray(mean, dtype=get_dtype())), covariance)
        return self

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _set(self, mean: np.ndarray, covariance) -> None:
        if mean.shape != (self._dim,):
            raise ValueError(
                f"Gaussian of dimension {self._dim} given mean of shape {mean.shape}"
            )
        mean = np.array(mean, copy=True)
        mean.setflags(write=False)
        # Maps hand out the same read-only covariance on every call
        if (
            covariance is self._covariance_source
            and isinstance(covariance, np.ndarray)
            and not covariance.flags.writeable
        ):
            self._mean = mean
            return

        cov = np.array(np.atleast_2d(np.asarray(covariance, dtype=get_dtype())), copy=True)
        if cov.shape != (self._dim, self._dim):
            raise ValueError(
                f"Gaussian of dimension {self._dim} given covariance of shape {cov.shape}"
            )
        if not np.all(np.isfinite(cov)):
            raise NumericalError("Gaussian covariance contains NaN or Inf")
        if not np.allclose(cov, cov.T, rtol=1e-8, atol=1e-12):
            raise NumericalError("Gaussian covariance is not symmetric")
        try:
            chol = np.linalg.cholesky(cov)
        except np.linalg.LinAlgError as e:
            raise NumericalError("Gaussian covariance is not positive definite") from e
        cov.setflags(write=False)

        self._mean = mean
        self._covariance = cov
        self._covariance_source = (
            covariance
            if isinstance(covariance, np.ndarray) and not covariance.flags.writeable
            else None
        )
        self._chol = chol
        log_det = 2.0 * np.sum(np.log(np.diag(chol)))
        self._log_norm = -0.5 * (self._dim * np.log(2 * np.pi) + log_det)

    def __repr__(self) -> str:
        return f"Gaussian(dim={self._dim})"
