"""
Exception hierarchy.

- ConstructionError: composed layers, maps or filters do not fit together
- PreconditionError: a call was made out of order or with wrong arguments
- NumericalError: a decomposition or normalization broke down
"""


class SSMError(Exception):
    """Base class for all ssmpack errors."""


class ConstructionError(SSMError, ValueError):
    """Raised when a composition is rejected (type or dimension mismatch)."""


class PreconditionError(SSMError, RuntimeError):
    """Raised when an operation is called in a state or with arguments it does not accept."""


class NumericalError(SSMError, ArithmeticError):
    """Raised when a numerical operation fails (non-PD matrix, vanished weights, NaN/Inf)."""
