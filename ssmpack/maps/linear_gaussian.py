"""
Affine linear-Gaussian parameter maps.

    LinearGaussian:                   x      -> (F x, Q)
    ControlledLinearGaussian:         (x, u) -> (F x + B u, Q)
    SwitchingAdditiveLinearGaussian:  (x, k) -> (F x + b_k, Q)
"""

import numpy as np

from .base import LinearGaussianMap, as_matrix, as_vector
from ..distributions.base import VariableSpec, as_label
from ..exceptions import ConstructionError


class LinearGaussian(LinearGaussianMap):
    """x -> (F x, Q)."""

    @property
    def condition_specs(self):
        return (VariableSpec("real", self.input_dim),)

    def mean(self, x) -> np.ndarray:
        return self.transfer @ as_vector(x, self.input_dim, "x")

    def __repr__(self) -> str:
        return f"LinearGaussian(n={self.output_dim}, m={self.input_dim})"


class ControlledLinearGaussian(LinearGaussianMap):
    """
    (x, u) -> (F x + B u, Q).

    Attributes:
        control: [n, k] Control input matrix B
    """

    def __init__(self, transfer, covariance, control):
        """
        Args:
            transfer: [n, m] Transfer matrix F
            covariance: [n, n] Noise covariance Q
            control: [n, k] Control matrix B
        """
        super().__init__(transfer, covariance)
        self.control = as_matrix(control, "control")
        if self.control.shape[0] != self.output_dim:
            raise ConstructionError(
                f"Control matrix has {self.control.shape[0]} rows, "
                f"expected {self.output_dim}"
            )

    @property
    def condition_specs(self):
        return (
            VariableSpec("real", self.input_dim),
            VariableSpec("real", self.control.shape[1]),
        )

    def mean(self, x, u) -> np.ndarray:
        x = as_vector(x, self.input_dim, "x")
        u = as_vector(u, self.control.shape[1], "u")
        return self.transfer @ x + self.control @ u

    def __repr__(self) -> str:
        return (f"ControlledLinearGaussian(n={self.output_dim}, m={self.input_dim}, "
                f"k={self.control.shape[1]})")


class SwitchingAdditiveLinearGaussian(LinearGaussianMap):
    """
    (x, k) -> (F x + biases[:, k], Q) with a categorical regime k.

    Attributes:
        biases: [n, K] One additive bias column per regime
    """

    def __init__(self, transfer, covariance, biases):
        """
        Args:
            transfer: [n, m] Transfer matrix F
            covariance: [n, n] Noise covariance Q
            biases: [n, K] Additive bias for each of the K regimes
        """
        super().__init__(transfer, covariance)
        self.biases = as_matrix(biases, "biases")
        if self.biases.shape[0] != self.output_dim:
            raise ConstructionError(
                f"Biases have {self.biases.shape[0]} rows, expected {self.output_dim}"
            )

    @property
    def n_regimes(self) -> int:
        return self.biases.shape[1]

    @property
    def condition_specs(self):
        return (
            VariableSpec("real", self.input_dim),
            VariableSpec("categorical", self.n_regimes),
        )

    def mean(self, x, k) -> np.ndarray:
        x = as_vector(x, self.input_dim, "x")
        k = as_label(k, self.n_regimes, "regime")
        return self.transfer @ x + self.biases[:, k]

    def __repr__(self) -> str:
        return (f"SwitchingAdditiveLinearGaussian(n={self.output_dim}, "
                f"m={self.input_dim}, K={self.n_regimes})")
