"""
Categorical distribution over the labels 0, ..., K-1.
"""

import warnings

import numpy as np
from numpy.random import Generator
from typing import Optional

from .base import Distribution, VariableSpec, ParameterSpec, as_label
from ..config import get_dtype, get_probability_tolerance
from ..random import resolve


class Categorical(Distribution):
    """
    Categorical distribution with probability vector p.

    The default is a single category with probability one, which always
    samples label 0.
    """

    def __init__(self, probabilities=None):
        """
        Args:
            probabilities: [K] Probability of each label (default [1.0])
        """
        if probabilities is None:
            probabilities = np.ones(1)
        p = self._validate(probabilities)
        self._size = p.shape[0]
        self._set(p)

    @classmethod
    def uniform(cls, size: int) -> "Categorical":
        """Categorical with equal probability on size labels."""
        return cls(np.full(size, 1.0 / size))

    @property
    def size(self) -> int:
        return self._size

    @property
    def probabilities(self) -> np.ndarray:
        return self._p

    @property
    def variable_spec(self) -> VariableSpec:
        return VariableSpec("categorical", self._size)

    @property
    def parameter_spec(self) -> ParameterSpec:
        return ParameterSpec("categorical", self._size)

    def random(self, *, rng: Optional[Generator] = None) -> int:
        """Draw one label by inverting the cumulative distribution."""
        u = resolve(rng).random()
        k = int(np.searchsorted(self._cdf, u, side="right"))
        return min(k, self._size - 1)

    def likelihood(self, x) -> float:
        return float(self._p[as_label(x, self._size, "label")])

    def parameterize(self, parameters) -> "Categorical":
        """
        Args:
            parameters: [K] probability vector (same K as at construction)

        Returns:
            self
        """
        p = self._validate(parameters)
        if p.shape[0] != self._size:
            raise ValueError(
                f"Categorical with {self._size} categories given {p.shape[0]} probabilities"
            )
        self._set(p)
        return self

    def _set(self, p: np.ndarray) -> None:
        self._p = p
        cdf = np.cumsum(p)
        # Guard the last bin against round-off so every u in [0, 1) maps to a label
        self._cdf = cdf / cdf[-1]

    @staticmethod
    def _validate(probabilities) -> np.ndarray:
        p = np.atleast_1d(np.asarray(probabilities, dtype=get_dtype()))
        if p.ndim != 1 or p.shape[0] == 0:
            raise ValueError(f"Probabilities must be a non-empty vector, got shape {p.shape}")
        if np.any(p < 0) or not np.all(np.isfinite(p)):
            raise ValueError("Probabilities must be finite and non-negative")
        total = p.sum()
        if total <= 0:
            raise ValueError("Probabilities sum to zero")
        if abs(total - 1.0) > get_probability_tolerance():
            warnings.warn(
                f"Probabilities sum to {total:.6g}; renormalizing.",
                RuntimeWarning,
            )
            p = p / total
        return p

    def __repr__(self) -> str:
        return f"Categorical(size={self._size})"
