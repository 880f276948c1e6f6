"""
Parameter maps from condition variables to distribution parameters.
"""

from .base import ParameterMap, LinearGaussianMap
from .linear_gaussian import (
    LinearGaussian,
    ControlledLinearGaussian,
    SwitchingAdditiveLinearGaussian,
)
from .transition_matrix import TransitionMatrix
from .function import FunctionMap

__all__ = [
    "ParameterMap",
    "LinearGaussianMap",
    "LinearGaussian",
    "ControlledLinearGaussian",
    "SwitchingAdditiveLinearGaussian",
    "TransitionMatrix",
    "FunctionMap",
]
