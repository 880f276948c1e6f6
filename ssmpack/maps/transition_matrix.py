"""
Transition matrix map for categorical Markov chains.
"""

import numpy as np

from .base import ParameterMap, as_matrix
from ..config import get_probability_tolerance
from ..distributions.base import ParameterSpec, VariableSpec, as_label
from ..exceptions import ConstructionError


class TransitionMatrix(ParameterMap):
    """
    k -> matrix[:, k], the distribution of the next label given label k.

    Attributes:
        matrix: [K, K] Column-stochastic transition matrix
    """

    def __init__(self, matrix):
        self.matrix = as_matrix(matrix, "transition matrix")
        K = self.matrix.shape[0]
        if self.matrix.shape != (K, K):
            raise ConstructionError(
                f"Transition matrix must be square, got {self.matrix.shape}"
            )
        if np.any(self.matrix < 0):
            raise ConstructionError("Transition probabilities must be non-negative")
        if not np.allclose(self.matrix.sum(axis=0), 1.0, atol=get_probability_tolerance()):
            raise ConstructionError("Transition matrix columns must sum to one")

    @property
    def n_states(self) -> int:
        return self.matrix.shape[0]

    @property
    def condition_specs(self):
        return (VariableSpec("categorical", self.n_states),)

    @property
    def parameter_spec(self) -> ParameterSpec:
        return ParameterSpec("categorical", self.n_states)

    def __call__(self, k) -> np.ndarray:
        return self.matrix[:, as_label(k, self.n_states, "state")]

    def __repr__(self) -> str:
        return f"TransitionMatrix(K={self.n_states})"
