"""
Parameter maps.

A parameter map is a pure function g(y_0, ..., y_N) -> theta from condition
variables to distribution parameters. It declares how many condition
variables it takes (arity), their types, and the type of parameter it
produces, so conditionals and processes can be checked at composition time.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

from ..config import get_dtype
from ..distributions.base import ParameterSpec, VariableSpec
from ..exceptions import ConstructionError, PreconditionError


def as_matrix(a, name: str) -> np.ndarray:
    """Convert to a read-only 2-D float array (scalars become [1, 1], vectors a row)."""
    m = np.array(np.atleast_2d(np.asarray(a, dtype=get_dtype())))
    if m.ndim != 2:
        raise ConstructionError(f"{name} must be a matrix, got shape {m.shape}")
    if not np.all(np.isfinite(m)):
        raise ConstructionError(f"{name} contains NaN or Inf")
    m.setflags(write=False)
    return m


def as_vector(x, size: int, name: str) -> np.ndarray:
    """Convert a condition variable to a 1-D array of the expected length."""
    v = np.atleast_1d(np.asarray(x, dtype=get_dtype()))
    if v.shape != (size,):
        raise PreconditionError(f"{name} must have shape ({size},), got {v.shape}")
    return v


class ParameterMap(ABC):
    """Base class for parameter maps g(y...) -> theta."""

    @abstractmethod
    def __call__(self, *conditions):
        """Map condition variables to a distribution parameter."""

    @property
    def arity(self) -> int:
        """Number of condition variables."""
        return len(self.condition_specs)

    @property
    @abstractmethod
    def condition_specs(self) -> Tuple[Optional[VariableSpec], ...]:
        """Type of each condition variable, in call order."""

    @property
    @abstractmethod
    def parameter_spec(self) -> Optional[ParameterSpec]:
        """Type of the produced parameter."""


class LinearGaussianMap(ParameterMap):
    """
    Affine linear-Gaussian capability.

    Maps (x, y_1, ..., y_N) to (mean(x, y_1, ..., y_N), covariance) where the
    mean is affine in x with matrix ``transfer``. The Kalman filter only
    accepts layers built on maps with this capability, since it needs the
    transfer matrix and noise covariance rather than an opaque sampler.

    Attributes:
        transfer: [n, m] Linear part of the mean (F or H)
        covariance: [n, n] Additive noise covariance (Q or R)
    """

    def __init__(self, transfer, covariance):
        """
        Args:
            transfer: [n, m] Transfer matrix
            covariance: [n, n] Noise covariance
        """
        self.transfer = as_matrix(transfer, "transfer")
        self.covariance = as_matrix(covariance, "covariance")
        n = self.transfer.shape[0]
        if self.covariance.shape != (n, n):
            raise ConstructionError(
                f"Covariance of shape {self.covariance.shape} does not match "
                f"transfer output dimension {n}"
            )
        if not np.allclose(self.covariance, self.covariance.T):
            raise ConstructionError("Covariance must be symmetric")

    @property
    def input_dim(self) -> int:
        return self.transfer.shape[1]

    @property
    def output_dim(self) -> int:
        return self.transfer.shape[0]

    @property
    def parameter_spec(self) -> ParameterSpec:
        return ParameterSpec("gaussian", self.output_dim)

    @abstractmethod
    def mean(self, x, *args) -> np.ndarray:
        """Affine mean given x and any extra condition variables."""

    def __call__(self, *conditions) -> Tuple[np.ndarray, np.ndarray]:
        return self.mean(*conditions), self.covariance
