"""
Evaluation metrics for filtering.
"""

import numpy as np
from typing import Tuple


def compute_rmse(
    xs_true: np.ndarray,
    xs_est: np.ndarray,
) -> Tuple[np.ndarray, float]:
    """
    Compute Root Mean Square Error per time step.

    When the estimates have one row fewer than the truth, they are taken to
    start at x_1 and x_0 is dropped from the truth.
    
    Args:
        xs_true: [T+1, nx] True states
        xs_est: [T+1, nx] or [T, nx] Estimated states (e.g. FilterResult.means)
        
    Returns:
        rmse_per_step: [T] or [T+1] RMSE at each time step
        rmse_mean: Mean RMSE over all time steps
    """
    xs_true = np.atleast_2d(np.asarray(xs_true, dtype=float))
    xs_est = np.atleast_2d(np.asarray(xs_est, dtype=float))
    if xs_est.shape[0] == xs_true.shape[0] - 1:
        xs_true = xs_true[1:]
    if xs_est.shape != xs_true.shape:
        raise ValueError(
            f"Estimated states {xs_est.shape} do not align with true states {xs_true.shape}"
        )

    rmse_per_step = np.sqrt(np.mean((xs_true - xs_est) ** 2, axis=1))
    return rmse_per_step, float(np.mean(rmse_per_step))
