"""
Distribution capability and variable type descriptors.

A distribution exposes three operations:
    random()            draw one sample with the current parameters
    likelihood(x)       density (or mass) of x under the current parameters
    parameterize(p)     replace the parameters, returning the distribution

``VariableSpec`` and ``ParameterSpec`` describe the "types" flowing between
distributions, parameter maps and process layers so that compositions can
be checked when they are built rather than when they are first sampled.
"""

from abc import ABC, abstractmethod
from typing import NamedTuple, Optional

import numpy as np
from numpy.random import Generator

from ..config import get_dtype
from ..exceptions import PreconditionError


class VariableSpec(NamedTuple):
    """
    Type of a random or condition variable.

    Attributes:
        kind: "real" for a real vector, "categorical" for an integer label
        size: Vector length (real) or number of categories (categorical)
    """
    kind: str
    size: int

    def default(self):
        """Sentinel value of this type: zero vector or category 0."""
        if self.kind == "categorical":
            return 0
        return np.zeros(self.size, dtype=get_dtype())


class ParameterSpec(NamedTuple):
    """
    Type of a distribution parameter.

    Attributes:
        family: Distribution family the parameter belongs to ("gaussian", "categorical")
        size: Dimension of the distribution
    """
    family: str
    size: int


def compatible(a: Optional[tuple], b: Optional[tuple]) -> bool:
    """Two specs match when either is unknown (None) or they are equal."""
    return a is None or b is None or tuple(a) == tuple(b)


def as_label(k, size: int, name: str) -> int:
    """Convert a categorical variable to an int in [0, size); non-integral values are rejected."""
    value = np.asarray(k)
    if value.ndim != 0 or value.dtype.kind not in "iuf":
        raise PreconditionError(f"{name} must be an integer label, got {k!r}")
    if value.dtype.kind == "f" and not (np.isfinite(value) and float(value).is_integer()):
        raise PreconditionError(f"{name} must be an integer label, got {k!r}")
    label = int(value)
    if not 0 <= label < size:
        raise PreconditionError(f"{name} must be in [0, {size}), got {k}")
    return label


class Distribution(ABC):
    """Base class for parametric distributions."""

    @abstractmethod
    def random(self, *, rng: Optional[Generator] = None):
        """Draw one sample."""

    @abstractmethod
    def likelihood(self, x) -> float:
        """Evaluate the density (or mass) at x."""

    @abstractmethod
    def parameterize(self, parameters) -> "Distribution":
        """Replace the parameters and return self."""

    @property
    @abstractmethod
    def variable_spec(self) -> Optional[VariableSpec]:
        """Type of the random variable."""

    @property
    @abstractmethod
    def parameter_spec(self) -> Optional[ParameterSpec]:
        """Type of the parameter accepted by parameterize()."""

    def log_likelihood(self, x) -> float:
        """Log density at x."""
        with np.errstate(divide="ignore"):
            return float(np.log(self.likelihood(x)))
