"""
Wrapper turning an arbitrary callable into a parameter map.
"""

from typing import Callable, Optional, Sequence

from .base import ParameterMap
from ..distributions.base import ParameterSpec, VariableSpec
from ..exceptions import ConstructionError


class FunctionMap(ParameterMap):
    """
    Parameter map backed by a user function, e.g. a nonlinear mean for a particle filter.

    Types left as None are not checked at composition time.
    """

    def __init__(
        self,
        fn: Callable,
        arity: int,
        parameter_spec: Optional[ParameterSpec] = None,
        condition_specs: Optional[Sequence[Optional[VariableSpec]]] = None,
    ):
        """
        Args:
            fn: Callable fn(y_0, ..., y_{arity-1}) -> parameter
            arity: Number of condition variables fn takes
            parameter_spec: Type of the parameter fn returns
            condition_specs: Type of each condition variable
        """
        if arity < 0:
            raise ConstructionError(f"Arity must be non-negative, got {arity}")
        if condition_specs is None:
            condition_specs = (None,) * arity
        condition_specs = tuple(condition_specs)
        if len(condition_specs) != arity:
            raise ConstructionError(
                f"{len(condition_specs)} condition types given for arity {arity}"
            )
        self.fn = fn
        self._condition_specs = condition_specs
        self._parameter_spec = parameter_spec

    @property
    def condition_specs(self):
        return self._condition_specs

    @property
    def parameter_spec(self):
        return self._parameter_spec

    def __call__(self, *conditions):
        return self.fn(*conditions)

    def __repr__(self) -> str:
        return f"FunctionMap({getattr(self.fn, '__name__', self.fn)!r}, arity={self.arity})"
