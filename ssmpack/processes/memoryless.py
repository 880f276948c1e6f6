"""
Memoryless (white) process: x_k ~ p(x | y_1, ..., y_N), independent over k.
"""

from typing import Optional

from numpy.random import Generator

from .base import BaseProcess
from ..distributions.conditional import Conditional


class Memoryless(BaseProcess):
    """
    Stateless process defined by a conditional distribution.

    initialize() returns the default value of the random-variable type (a
    zero vector or label 0): there is no initial distribution, but the method
    exists so a Hierarchical process can initialize every layer uniformly.
    """

    def __init__(self, cpdf: Conditional):
        self._cpdf = cpdf

    @property
    def cpdf(self) -> Conditional:
        return self._cpdf

    @property
    def arity(self) -> int:
        return self._cpdf.arity

    @property
    def variable_spec(self):
        return self._cpdf.variable_spec

    @property
    def condition_specs(self):
        return tuple(self._cpdf.condition_specs)

    def initialize(self, *, rng: Optional[Generator] = None):
        spec = self.variable_spec
        return None if spec is None else spec.default()

    def random(self, *conditions, rng: Optional[Generator] = None):
        return self._cpdf.random(*conditions, rng=rng)

    def likelihood(self, x, *conditions) -> float:
        return self._cpdf.likelihood(x, *conditions)

    def log_likelihood(self, x, *conditions) -> float:
        return self._cpdf.log_likelihood(x, *conditions)

    def __repr__(self) -> str:
        return f"Memoryless({self._cpdf!r})"
