"""
Module-wide numeric configuration.

Provides ``set_dtype``/``get_dtype`` to control the float dtype of every
array created by ssmpack (default ``np.float64``), and
``set_probability_tolerance``/``get_probability_tolerance`` for the
absolute tolerance used when checking that probability vectors sum to one.
"""

import numpy as np

_VALID_DTYPES = (np.float32, np.float64)

_dtype = np.float64
_probability_tolerance = 1e-8


def set_dtype(dtype) -> None:
    """
    Set the module-wide float dtype.

    Only affects arrays created after the call; existing distributions,
    maps and filters keep the dtype they were built with.

    Args:
        dtype: ``np.float32`` or ``np.float64``

    Raises:
        ValueError: If dtype is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: np.float32, np.float64"
        )
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype."""
    return _dtype


def set_probability_tolerance(tol: float) -> None:
    """
    Set the tolerance for probability vectors summing to one.

    Args:
        tol: Absolute tolerance (must be positive)

    Raises:
        ValueError: If tol is not positive.
    """
    global _probability_tolerance
    if not tol > 0:
        raise ValueError(f"Probability tolerance must be positive, got {tol}")
    _probability_tolerance = float(tol)


def get_probability_tolerance() -> float:
    """Return the tolerance for probability vectors summing to one."""
    return _probability_tolerance
