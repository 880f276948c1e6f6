"""
State space model definitions.
"""

from .linear_gaussian import (
    make_lgssm,
    make_lgssm_from_chol,
    make_controlled_lgssm,
    make_constant_velocity,
)
from .switching import make_switching_lgssm, make_switching_acceleration
from .range_bearing import make_range_bearing_ssm, RangeBearingStudentT

__all__ = [
    "make_lgssm",
    "make_lgssm_from_chol",
    "make_controlled_lgssm",
    "make_constant_velocity",
    "make_switching_lgssm",
    "make_switching_acceleration",
    "make_range_bearing_ssm",
    "RangeBearingStudentT",
]
