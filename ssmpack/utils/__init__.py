"""
Utility functions.
"""

from .resampling import (
    systematic_positions,
    stratified_positions,
    inverse_cdf_select,
    effective_sample_size,
    normalize_log_weights,
)

from .metrics import compute_rmse

__all__ = [
    "systematic_positions",
    "stratified_positions",
    "inverse_cdf_select",
    "effective_sample_size",
    "normalize_log_weights",
    "compute_rmse",
]
