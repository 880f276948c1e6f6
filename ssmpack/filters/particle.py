"""
Particle filter.

Bootstrap/SIR particle filter over a two-layer hierarchical process: the
transition conditional of the state layer is the proposal, the measurement
conditional weights the particles and a Resampler keeps the population
healthy.
"""

import logging
from typing import Optional

import numpy as np
from numpy.random import Generator, default_rng

from .base import ParticleBelief, RecursiveBayesianFilter
from .resampler import BaseResampler
from ..config import get_dtype
from ..exceptions import ConstructionError, PreconditionError
from ..processes.hierarchical import Hierarchical
from ..processes.markov import Markov
from ..processes.memoryless import Memoryless
from ..random import resolve
from ..utils.resampling import effective_sample_size, normalize_log_weights

logger = logging.getLogger(__name__)


class ParticleFilter(RecursiveBayesianFilter):
    """
    Bootstrap Particle Filter (Sequential Importance Resampling).
    
    Uses the transition prior as proposal distribution. Any parameter map
    is accepted, so nonlinear models work through FunctionMap.

    Particles are stored as the columns of an [nx, M] matrix.
    """
    
    def __init__(
        self,
        process: Hierarchical,
        resampler: BaseResampler,
        n_particles: int = 1000,
        seed: Optional[int] = None,
    ):
        """
        Args:
            process: Hierarchical(Markov, Memoryless) with a real-valued state
            resampler: Resampler applied after each correction
            n_particles: Number of particles M
            seed: Random seed (None uses the thread-scoped generator)
        """
        if not isinstance(process, Hierarchical) or len(process) != 2:
            raise ConstructionError("Particle filter needs a two-layer Hierarchical process")
        dynamic, measurement = process.get_process(0), process.get_process(1)
        if not isinstance(dynamic, Markov) or not isinstance(measurement, Memoryless):
            raise ConstructionError(
                "Particle filter needs a Markov state layer and a Memoryless measurement layer"
            )
        spec = dynamic.variable_spec
        if spec is None or spec.kind != "real":
            raise ConstructionError(f"Particle filter needs a real-valued state, got {spec}")
        if int(n_particles) != n_particles or n_particles <= 0:
            raise ConstructionError(f"n_particles must be a positive integer, got {n_particles}")

        self._process = process
        self._transition = dynamic.cpdf
        self._measurement = measurement.cpdf
        self._initial_pdf = dynamic.initial_pdf
        self._n_dynamic_controls = dynamic.arity
        self._n_measurement_controls = measurement.arity - 1

        self.resampler = resampler
        self.n_particles = int(n_particles)
        self.state_dim = spec.size
        self.seed = seed
        self._rng = None if seed is None else default_rng(seed)

        self._particles = np.zeros((self.state_dim, self.n_particles), dtype=get_dtype())
        self._weights = np.full(self.n_particles, 1.0 / self.n_particles, dtype=get_dtype())
        self._initialized = False
        self.ess = float(self.n_particles)
        self.resampled = False
        self.log_likelihood = 0.0

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def process(self) -> Hierarchical:
        return self._process

    @property
    def rng(self) -> Generator:
        return resolve(self._rng)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def particles(self) -> np.ndarray:
        """[nx, M] Current particles."""
        return self._particles.copy()

    @property
    def weights(self) -> np.ndarray:
        """[M] Current normalized weights."""
        return self._weights.copy()

    @property
    def belief(self) -> ParticleBelief:
        return ParticleBelief(self._particles.copy(), self._weights.copy())

    # -------------------------------------------------------------------------
    # Recursion
    # -------------------------------------------------------------------------

    def initialize(self) -> ParticleBelief:
        """
        Draw M particles from the initial distribution.

        Each particle is weighted by the initial density at its location and
        the weights are normalized.

        Returns:
            Initial belief (particles, weights)
        """
        rng = self.rng
        M = self.n_particles
        particles = np.empty((self.state_dim, M), dtype=get_dtype())
        log_weights = np.empty(M)
        for j in range(M):
            particles[:, j] = self._initial_pdf.random(rng=rng)
            log_weights[j] = self._initial_pdf.log_likelihood(particles[:, j])

        self._particles = particles
        self._weights, _ = normalize_log_weights(log_weights)
        self._initialized = True
        self.ess = effective_sample_size(self._weights)
        self.resampled = False
        self.log_likelihood = 0.0
        logger.debug("Particle filter initialized with %d particles", M)
        return self.belief

    def predict(self, *controls) -> ParticleBelief:
        """
        Propagate every particle through the transition conditional.

        Weights are left unchanged.

        Args:
            *controls: Control variables of the state layer, if any

        Returns:
            Predicted belief (particles, weights)
        """
        self._require_initialized("predict")
        self._check_controls(controls, self._n_dynamic_controls, "predict")
        rng = self.rng
        particles = np.empty_like(self._particles)
        for j in range(self.n_particles):
            particles[:, j] = self._transition.random(self._particles[:, j], *controls, rng=rng)
        self._particles = particles
        return self.belief

    def correct(self, measurement, *controls) -> ParticleBelief:
        """
        Weight the particles by the measurement likelihood, then resample.

            w_j <- w_j * p(z | x_j, controls),  normalized to sum to 1

        Args:
            measurement: Measurement z_t
            *controls: Control variables of the measurement layer, if any

        Returns:
            Corrected belief (particles, weights); weights sum to 1 whether
            or not the resampler fired

        Raises:
            PreconditionError: Before initialize() or on a control count mismatch.
            NumericalError: If every weight vanishes.
        """
        self._require_initialized("correct")
        self._check_controls(controls, self._n_measurement_controls, "correct")

        log_lik = np.array([
            self._measurement.log_likelihood(measurement, self._particles[:, j], *controls)
            for j in range(self.n_particles)
        ])
        with np.errstate(divide="ignore"):
            log_weights = np.log(self._weights) + log_lik

        weights, log_sum = normalize_log_weights(log_weights)
        self.log_likelihood += float(log_sum)

        self.ess = effective_sample_size(weights)
        if self.n_particles > 1 and self.ess <= 1.0 + 1e-9:
            logger.warning(
                "Particle degeneracy: ESS collapsed to %.3f of %d particles",
                self.ess, self.n_particles,
            )

        particles, weights, self.resampled = self.resampler.resample(
            self._particles, weights, self.rng
        )
        self._particles = np.asarray(particles)
        self._weights = np.asarray(weights)
        return self.belief

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def _require_initialized(self, op: str) -> None:
        if not self._initialized:
            raise PreconditionError(f"ParticleFilter.{op} used before initialize()")

    @staticmethod
    def _check_controls(controls: tuple, expected: int, op: str) -> None:
        if len(controls) != expected:
            raise PreconditionError(
                f"ParticleFilter.{op}() expects {expected} control variable(s), got {len(controls)}"
            )

    def __repr__(self) -> str:
        return (
            f"ParticleFilter(n_particles={self.n_particles}, "
            f"resampler={self.resampler!r})"
        )
