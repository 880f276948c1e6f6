"""
Resampling primitives for particle filters.

Resampling draws N indices with replacement from a weighted population by
inverting the cumulative weight function at N ordered positions in [0, 1).
The schemes differ only in how the positions are generated.
"""

import numpy as np
from numpy.random import Generator

from ..exceptions import NumericalError


def systematic_positions(n: int, rng: Generator) -> np.ndarray:
    """
    Systematic positions.

    Deterministic spacing with single random offset. Low variance.

    Args:
        n: Number of positions
        rng: NumPy random generator

    Returns:
        u: [n] strictly increasing, u[k] = (k + u0) / n with u0 ~ U[0, 1)
    """
    u0 = rng.random()
    return (np.arange(n) + u0) / n


def stratified_positions(n: int, rng: Generator) -> np.ndarray:
    """
    Stratified positions.

    Independent random draw within each stratum. Slightly higher variance
    than systematic but still good.

    Args:
        n: Number of positions
        rng: NumPy random generator

    Returns:
        u: [n] with u[k] uniform in [k/n, (k+1)/n)
    """
    return (np.arange(n) + rng.random(n)) / n


def inverse_cdf_select(weights: np.ndarray, positions: np.ndarray) -> np.ndarray:
    """
    Select indices by inverting the cumulative weights.

    For each position u the selected index is the smallest i with
    cumsum(w)[i] > u, so particles with zero weight are never selected.

    Args:
        weights: [N] Non-negative weights
        positions: [K] Positions in [0, 1)

    Returns:
        indices: [K] Selected particle indices
    """
    cdf = np.cumsum(weights)
    # Scale so the last entry is exactly 1.0 and every u < 1 finds a bin
    cdf = cdf / cdf[-1]
    indices = np.searchsorted(cdf, positions, side='right')
    return np.minimum(indices, len(weights) - 1)


def effective_sample_size(weights: np.ndarray) -> float:
    """
    Compute effective sample size (ESS).

    ESS = (sum w_i)^2 / sum(w_i^2), which is 1 / sum(w_i^2) for normalized weights.

    Args:
        weights: [N] Non-negative weights

    Returns:
        ESS value in [1, N]
    """
    weights = np.asarray(weights, dtype=float)
    return float(np.sum(weights) ** 2 / np.sum(weights ** 2))


def normalize_log_weights(log_weights: np.ndarray) -> tuple:
    """
    Normalize log weights to get normalized weights.

    Args:
        log_weights: [N] Unnormalized log weights

    Returns:
        weights: [N] Normalized weights (sum to 1)
        log_normalizer: Log of the normalizing constant

    Raises:
        NumericalError: If every weight is zero or any log weight is NaN/+Inf.
    """
    if np.any(np.isnan(log_weights)) or np.any(log_weights == np.inf):
        raise NumericalError("Log weights contain NaN or +Inf")
    max_log = np.max(log_weights)
    if max_log == -np.inf:
        raise NumericalError("All particle weights vanished")

    # Log-sum-exp for numerical stability
    log_sum = max_log + np.log(np.sum(np.exp(log_weights - max_log)))

    # Normalized weights
    weights = np.exp(log_weights - log_sum)

    return weights, log_sum
