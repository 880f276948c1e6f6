"""
State Space Modelling Library.

A NumPy-based library for recursive Bayesian estimation with:
- Composable distributions, conditional distributions and parameter maps
- Markov, Memoryless and Hierarchical (dynamic Bayesian network) processes
- Kalman filter (linear Gaussian) and particle filter (SIR) with resamplers
"""

from . import config
from . import exceptions
from . import random
from . import distributions
from . import maps
from . import processes
from . import models
from . import filters
from . import simulation
from . import utils

from .exceptions import SSMError, ConstructionError, PreconditionError, NumericalError
from .distributions import Gaussian, Categorical, Conditional
from .processes import Markov, Memoryless, Hierarchical
from .filters import KalmanFilter, ParticleFilter, SystematicResampler, ESSCriterion

__version__ = "0.1.0"
