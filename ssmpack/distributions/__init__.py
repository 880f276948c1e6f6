"""
Probability distributions and conditional distributions.
"""

from .base import Distribution, VariableSpec, ParameterSpec, compatible
from .gaussian import Gaussian
from .categorical import Categorical
from .student_t import StudentT
from .conditional import Conditional

__all__ = [
    "Distribution",
    "VariableSpec",
    "ParameterSpec",
    "compatible",
    "Gaussian",
    "Categorical",
    "StudentT",
    "Conditional",
]
