"""
Parametric conditional distribution.

For x in X and condition variables (y_0, ..., y_N),

    p(x | y_0, ..., y_N) = F(g(y_0, ..., y_N))

where F(theta) is a distribution and g maps condition variables to its
parameter theta.
"""

from typing import Optional, Tuple

from numpy.random import Generator

from .base import Distribution, VariableSpec, compatible
from ..exceptions import ConstructionError, PreconditionError


class Conditional:
    """
    Conditional distribution p(x | y...) built from a distribution and a parameter map.

    Every random()/likelihood() call re-parameterizes the owned distribution,
    so one instance must not be shared between concurrent callers.
    """

    def __init__(self, pdf: Distribution, param_map):
        """
        Args:
            pdf: Distribution F(theta) providing random, likelihood and parameterize
            param_map: Callable g(y...) -> theta (see ssmpack.maps)

        Raises:
            ConstructionError: If the map's parameter type differs from the distribution's.
        """
        if not compatible(param_map.parameter_spec, pdf.parameter_spec):
            raise ConstructionError(
                f"Parameter map produces {param_map.parameter_spec} but "
                f"distribution expects {pdf.parameter_spec}"
            )
        self._pdf = pdf
        self._map = param_map

    @property
    def pdf(self) -> Distribution:
        return self._pdf

    @property
    def param_map(self):
        return self._map

    @property
    def arity(self) -> int:
        """Number of condition variables."""
        return self._map.arity

    @property
    def variable_spec(self) -> Optional[VariableSpec]:
        return self._pdf.variable_spec

    @property
    def condition_specs(self) -> Tuple[Optional[VariableSpec], ...]:
        return self._map.condition_specs

    def random(self, *conditions, rng: Optional[Generator] = None):
        """
        Sample x ~ p(x | conditions).

        Args:
            *conditions: Condition variables y_0, ..., y_N
            rng: Optional generator

        Returns:
            Random variable x
        """
        self._parameterize(conditions)
        return self._pdf.random(rng=rng)

    def likelihood(self, x, *conditions) -> float:
        """Evaluate p(x | conditions)."""
        self._parameterize(conditions)
        return self._pdf.likelihood(x)

    def log_likelihood(self, x, *conditions) -> float:
        """Evaluate log p(x | conditions)."""
        self._parameterize(conditions)
        return self._pdf.log_likelihood(x)

    def _parameterize(self, conditions: tuple) -> None:
        if len(conditions) != self._map.arity:
            raise PreconditionError(
                f"Conditional expects {self._map.arity} condition variable(s), "
                f"got {len(conditions)}"
            )
        self._pdf.parameterize(self._map(*conditions))

    def __repr__(self) -> str:
        return f"Conditional({self._pdf!r}, {self._map!r})"
