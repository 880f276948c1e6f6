"""
First-order Markov process.

    x_0 ~ p_0(x)
    x_k ~ p(x | x_{k-1}, y_1, ..., y_N)

The transition is a Conditional whose first condition variable is the
previous state; the remaining condition variables are exposed as controls.
"""

from typing import Optional

from numpy.random import Generator

from .base import BaseProcess, snapshot
from ..distributions.base import Distribution, compatible
from ..distributions.conditional import Conditional
from ..exceptions import ConstructionError, PreconditionError


class Markov(BaseProcess):
    """
    Stateful first-order Markov process.

    The process starts uninitialized; initialize() is the only way to get a
    state, and random()/likelihood() raise PreconditionError before it.
    """

    def __init__(self, cpdf: Conditional, initial_pdf: Distribution):
        """
        Args:
            cpdf: Transition p(x_k | x_{k-1}, y...)
            initial_pdf: Initial distribution p_0(x)

        Raises:
            ConstructionError: If the transition is not first-order in its own
                random variable, or the initial distribution has another type.
        """
        if cpdf.arity < 1:
            raise ConstructionError(
                "Markov transition needs the previous state as its first condition variable"
            )
        if not compatible(cpdf.condition_specs[0], cpdf.variable_spec):
            raise ConstructionError(
                f"Markov transition maps {cpdf.condition_specs[0]} to "
                f"{cpdf.variable_spec}; a first-order Markov process needs both equal"
            )
        if not compatible(initial_pdf.variable_spec, cpdf.variable_spec):
            raise ConstructionError(
                f"Initial distribution produces {initial_pdf.variable_spec}, "
                f"transition produces {cpdf.variable_spec}"
            )
        self._cpdf = cpdf
        self._initial_pdf = initial_pdf
        self._state = None
        self._initialized = False

    @property
    def cpdf(self) -> Conditional:
        return self._cpdf

    @property
    def initial_pdf(self) -> Distribution:
        return self._initial_pdf

    @property
    def state(self):
        return snapshot(self._state)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def arity(self) -> int:
        return self._cpdf.arity - 1

    @property
    def variable_spec(self):
        return self._cpdf.variable_spec

    @property
    def condition_specs(self):
        return tuple(self._cpdf.condition_specs[1:])

    def initialize(self, *, rng: Optional[Generator] = None):
        """Sample x_0 from the initial distribution and store it as the state."""
        self._state = self._initial_pdf.random(rng=rng)
        self._initialized = True
        return snapshot(self._state)

    def reset(self) -> None:
        """Return to the uninitialized state."""
        self._state = None
        self._initialized = False

    def random(self, *conditions, rng: Optional[Generator] = None):
        """
        Advance the process one step.

        Args:
            *conditions: Control variables y_1, ..., y_N
            rng: Optional generator

        Returns:
            The new state x_k
        """
        self._require_initialized("random")
        self._state = self._cpdf.random(self._state, *conditions, rng=rng)
        return snapshot(self._state)

    def likelihood(self, x, *conditions) -> float:
        """Evaluate p(x | current state, y...) without changing the state."""
        self._require_initialized("likelihood")
        return self._cpdf.likelihood(x, self._state, *conditions)

    def log_likelihood(self, x, *conditions) -> float:
        self._require_initialized("log_likelihood")
        return self._cpdf.log_likelihood(x, self._state, *conditions)

    def _require_initialized(self, op: str) -> None:
        if not self._initialized:
            raise PreconditionError(f"Markov.{op}() called before initialize()")

    def __repr__(self) -> str:
        return f"Markov({self._cpdf!r}, initial={self._initial_pdf!r})"
