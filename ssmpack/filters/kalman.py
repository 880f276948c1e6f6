"""
Kalman filter for a two-layer linear-Gaussian hierarchical process.

Dynamics:    x_t = F x_{t-1} + u_d(...) + v_t,  v_t ~ N(0, Q)
Observation: z_t = H x_t + u_m(...) + w_t,      w_t ~ N(0, R)

The affine terms u_d, u_m are whatever the layers' LinearGaussianMap adds
to the linear part (controls, regime biases); F, Q, H, R are read from the
maps once at construction.
"""

import logging

import numpy as np
from scipy.linalg import cho_factor, cho_solve

from .base import GaussianBelief, RecursiveBayesianFilter
from ..distributions.gaussian import Gaussian
from ..exceptions import ConstructionError, NumericalError, PreconditionError
from ..maps.base import LinearGaussianMap
from ..processes.hierarchical import Hierarchical
from ..processes.markov import Markov
from ..processes.memoryless import Memoryless

logger = logging.getLogger(__name__)


class KalmanFilter(RecursiveBayesianFilter):
    """
    Standard Kalman Filter for linear Gaussian models.
    
    Optimal for linear dynamics and linear observations with Gaussian noise.

    Example:
        >>> kf = KalmanFilter(make_lgssm(A, C, Q, R, m0, P0))
        >>> beliefs = kf.filter(observations)
        >>> mean, cov = beliefs[-1]
    """

    def __init__(self, process: Hierarchical):
        """
        Args:
            process: Hierarchical(Markov, Memoryless) whose layers are Gaussian
                conditionals over LinearGaussianMap parameter maps, with a
                Gaussian initial distribution

        Raises:
            ConstructionError: If the process does not have this structure or
                F, Q, H, R and the initial distribution disagree on dimensions.
        """
        dynamic, measurement = self._check_structure(process)
        self._process = process
        self._dynamic_map = dynamic.cpdf.param_map
        self._measurement_map = measurement.cpdf.param_map
        self._initial_pdf = dynamic.initial_pdf

        self.F = self._dynamic_map.transfer
        self.Q = self._dynamic_map.covariance
        self.H = self._measurement_map.transfer
        self.R = self._measurement_map.covariance

        nx = self.F.shape[0]
        if self.F.shape != (nx, nx):
            raise ConstructionError(f"Transition matrix must be square, got {self.F.shape}")
        if self.H.shape[1] != nx:
            raise ConstructionError(
                f"Measurement matrix has {self.H.shape[1]} columns, state dimension is {nx}"
            )
        if self._initial_pdf.dim != nx:
            raise ConstructionError(
                f"Initial distribution has dimension {self._initial_pdf.dim}, "
                f"state dimension is {nx}"
            )
        self.state_dim = nx
        self.obs_dim = self.H.shape[0]

        self._n_dynamic_controls = dynamic.arity
        self._n_measurement_controls = measurement.arity - 1

        self._mean = None
        self._cov = None
        self._pred_mean = None
        self._pred_cov = None
        self.innovation = None
        self.innovation_covariance = None
        self.gain = None
        self.log_likelihood = 0.0

    @staticmethod
    def _check_structure(process):
        if not isinstance(process, Hierarchical) or len(process) != 2:
            raise ConstructionError("Kalman filter needs a two-layer Hierarchical process")
        dynamic, measurement = process.get_process(0), process.get_process(1)
        if not isinstance(dynamic, Markov) or not isinstance(measurement, Memoryless):
            raise ConstructionError(
                "Kalman filter needs a Markov state layer and a Memoryless measurement layer"
            )
        for name, layer in (("state", dynamic), ("measurement", measurement)):
            if not isinstance(layer.cpdf.pdf, Gaussian):
                raise ConstructionError(f"The {name} layer must be Gaussian")
            if not isinstance(layer.cpdf.param_map, LinearGaussianMap):
                raise ConstructionError(
                    f"The {name} layer must use a linear-Gaussian parameter map"
                )
        if not isinstance(dynamic.initial_pdf, Gaussian):
            raise ConstructionError("The initial state distribution must be Gaussian")
        return dynamic, measurement

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def process(self) -> Hierarchical:
        return self._process

    @property
    def initialized(self) -> bool:
        return self._mean is not None

    @property
    def belief(self) -> GaussianBelief:
        """Current corrected belief."""
        self._require_initialized("belief")
        return GaussianBelief(self._mean.copy(), self._cov.copy())

    @property
    def predicted_belief(self) -> GaussianBelief:
        """Current predicted belief."""
        self._require_initialized("predicted_belief")
        return GaussianBelief(self._pred_mean.copy(), self._pred_cov.copy())

    # -------------------------------------------------------------------------
    # Recursion
    # -------------------------------------------------------------------------

    def initialize(self) -> GaussianBelief:
        """
        Set the belief to the initial distribution of the state layer.

        Returns:
            Initial belief (m_0, P_0)
        """
        self._mean = np.array(self._initial_pdf.mean, copy=True)
        self._cov = np.array(self._initial_pdf.covariance, copy=True)
        self._pred_mean = self._mean.copy()
        self._pred_cov = self._cov.copy()
        self.innovation = None
        self.innovation_covariance = None
        self.gain = None
        self.log_likelihood = 0.0
        logger.debug("Kalman filter initialized (nx=%d, ny=%d)", self.state_dim, self.obs_dim)
        return self.belief

    def predict(self, *controls) -> GaussianBelief:
        """
        Prediction step.

            m_pred = F m + u_d(controls)
            P_pred = F P F^T + Q

        Args:
            *controls: Control variables of the state layer, if any

        Returns:
            Predicted belief (m_pred, P_pred)
        """
        self._require_initialized("predict")
        self._check_controls(controls, self._n_dynamic_controls, "predict")

        m_pred, _ = self._dynamic_map(self._mean, *controls)
        P_pred = self.F @ self._cov @ self.F.T + self.Q
        P_pred = 0.5 * (P_pred + P_pred.T)  # Symmetrize

        self._check_finite(m_pred, P_pred, "prediction")
        self._pred_mean = np.asarray(m_pred)
        self._pred_cov = P_pred
        return self.predicted_belief

    def correct(self, measurement, *controls) -> GaussianBelief:
        """
        Correction step.

            v = z - (H m_pred + u_m(controls))
            S = H P_pred H^T + R
            K = P_pred H^T S^{-1}           (Cholesky solve, S must be PD)
            m = m_pred + K v
            P = P_pred - K H P_pred

        Args:
            measurement: [ny] Measurement z_t
            *controls: Control variables of the measurement layer, if any

        Returns:
            Corrected belief (m, P)

        Raises:
            PreconditionError: Before initialize(), or on a measurement of the wrong size.
            NumericalError: If S is not positive definite or the result is not finite.
        """
        self._require_initialized("correct")
        self._check_controls(controls, self._n_measurement_controls, "correct")
        z = np.atleast_1d(np.asarray(measurement, dtype=self._pred_mean.dtype))
        if z.shape != (self.obs_dim,):
            raise PreconditionError(
                f"Measurement must have shape ({self.obs_dim},), got {z.shape}"
            )

        m_pred, P_pred = self._pred_mean, self._pred_cov
        H = self.H

        # Innovation
        z_pred, _ = self._measurement_map(m_pred, *controls)
        v = z - z_pred

        # Innovation covariance
        S = H @ P_pred @ H.T + self.R
        S = 0.5 * (S + S.T)
        if not np.all(np.isfinite(S)):
            raise NumericalError("Innovation covariance contains NaN or Inf")
        try:
            S_chol = cho_factor(S, lower=True)
        except np.linalg.LinAlgError as e:
            raise NumericalError("Innovation covariance is not positive definite") from e

        # Kalman gain: K = P_pred @ H.T @ S^{-1}
        # Solve S @ K.T = H @ P_pred.T for K.T
        K = cho_solve(S_chol, H @ P_pred.T).T

        m_upd = m_pred + K @ v
        P_upd = P_pred - K @ H @ P_pred
        P_upd = 0.5 * (P_upd + P_upd.T)
        self._check_finite(m_upd, P_upd, "correction")

        # Log likelihood of the measurement
        S_logdet = 2.0 * np.sum(np.log(np.diag(S_chol[0])))
        mahal_sq = float(v @ cho_solve(S_chol, v))
        self.log_likelihood += -0.5 * (self.obs_dim * np.log(2 * np.pi) + S_logdet + mahal_sq)

        self.innovation = v
        self.innovation_covariance = S
        self.gain = K
        self._mean = m_upd
        self._cov = P_upd
        return self.belief

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def _require_initialized(self, op: str) -> None:
        if self._mean is None:
            raise PreconditionError(f"KalmanFilter.{op} used before initialize()")

    @staticmethod
    def _check_controls(controls: tuple, expected: int, op: str) -> None:
        if len(controls) != expected:
            raise PreconditionError(
                f"KalmanFilter.{op}() expects {expected} control variable(s), got {len(controls)}"
            )

    @staticmethod
    def _check_finite(mean: np.ndarray, cov: np.ndarray, stage: str) -> None:
        if not (np.all(np.isfinite(mean)) and np.all(np.isfinite(cov))):
            raise NumericalError(f"Kalman {stage} produced NaN or Inf")

    def __repr__(self) -> str:
        return f"KalmanFilter(nx={self.state_dim}, ny={self.obs_dim})"
