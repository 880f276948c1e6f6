"""
Process layer interface.

A process layer is one level of a dynamic Bayesian network. It exposes the
type of its random variable, the types and number of its condition (control)
variables, and three operations: initialize(), random(*y), likelihood(x, *y).
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np
from numpy.random import Generator

from ..distributions.base import VariableSpec


def snapshot(x):
    """Copy array-valued variables so callers cannot alias process state."""
    if isinstance(x, np.ndarray):
        return x.copy()
    return x


class BaseProcess(ABC):
    """Base class for stochastic process layers."""

    @property
    @abstractmethod
    def arity(self) -> int:
        """Number of condition variables accepted by random()/likelihood()."""

    @property
    @abstractmethod
    def variable_spec(self) -> Optional[VariableSpec]:
        """Type of the random variable produced by random()."""

    @property
    @abstractmethod
    def condition_specs(self) -> Tuple[Optional[VariableSpec], ...]:
        """Type of each condition variable, in call order."""

    @abstractmethod
    def initialize(self, *, rng: Optional[Generator] = None):
        """Start the process and return its initial random variable."""

    @abstractmethod
    def random(self, *conditions, rng: Optional[Generator] = None):
        """Draw the next random variable."""

    @abstractmethod
    def likelihood(self, x, *conditions) -> float:
        """Evaluate the density of x under the next-step distribution."""

    def log_likelihood(self, x, *conditions) -> float:
        with np.errstate(divide="ignore"):
            return float(np.log(self.likelihood(x, *conditions)))

    def random_n(self, n: int, *conditions, rng: Optional[Generator] = None) -> List:
        """
        Draw n consecutive random variables with the same condition variables.

        Args:
            n: Number of steps
            *conditions: Condition variables passed to every random() call
            rng: Optional generator

        Returns:
            List of n random variables
        """
        return [self.random(*conditions, rng=rng) for _ in range(n)]
