"""
Linear Gaussian State Space Model.

x_t = A @ x_{t-1} + v_t,  v_t ~ N(0, Q)
y_t = C @ x_t + w_t,      w_t ~ N(0, R)

Factories return a two-layer Hierarchical(Markov, Memoryless) process that
both KalmanFilter and ParticleFilter accept.
"""

import numpy as np

from ..config import get_dtype
from ..distributions import Conditional, Gaussian
from ..maps import ControlledLinearGaussian, LinearGaussian
from ..processes import Hierarchical, Markov, Memoryless


def _symmetric(M) -> np.ndarray:
    M = np.atleast_2d(np.asarray(M, dtype=get_dtype()))
    return 0.5 * (M + M.T)


def _measurement_layer(C, R) -> Memoryless:
    measurement_map = LinearGaussian(C, _symmetric(R))
    return Memoryless(Conditional(Gaussian.standard(measurement_map.output_dim), measurement_map))


def make_lgssm(
    A: np.ndarray,
    C: np.ndarray,
    Q: np.ndarray,
    R: np.ndarray,
    m0: np.ndarray,
    P0: np.ndarray,
) -> Hierarchical:
    """
    Create a Linear Gaussian State Space Model.
    
    Dynamics:    x_t = A @ x_{t-1} + v_t,  v_t ~ N(0, Q)
    Observation: y_t = C @ x_t + w_t,      w_t ~ N(0, R)
    
    Args:
        A: [nx, nx] State transition matrix
        C: [ny, nx] Observation matrix
        Q: [nx, nx] Process noise covariance
        R: [ny, ny] Observation noise covariance
        m0: [nx] Initial state mean
        P0: [nx, nx] Initial state covariance
        
    Returns:
        Hierarchical(state, measurement) process
    """
    dynamic_map = LinearGaussian(A, _symmetric(Q))
    nx = dynamic_map.output_dim
    state = Markov(
        Conditional(Gaussian.standard(nx), dynamic_map),
        Gaussian(m0, _symmetric(P0)),
    )
    return Hierarchical(state, _measurement_layer(C, R))


def make_lgssm_from_chol(
    A: np.ndarray,
    C: np.ndarray,
    B: np.ndarray,
    D: np.ndarray,
    m0: np.ndarray,
    P0: np.ndarray,
) -> Hierarchical:
    """
    Create LGSSM from noise Cholesky factors.
    
    Q = B @ B.T
    R = D @ D.T
    
    Args:
        A: [nx, nx] State transition matrix
        C: [ny, nx] Observation matrix
        B: [nx, nv] Process noise factor (Q = B @ B.T)
        D: [ny, nw] Observation noise factor (R = D @ D.T)
        m0: [nx] Initial state mean
        P0: [nx, nx] Initial state covariance
        
    Returns:
        Hierarchical(state, measurement) process
    """
    B = np.atleast_2d(np.asarray(B, dtype=get_dtype()))
    D = np.atleast_2d(np.asarray(D, dtype=get_dtype()))
    
    Q = B @ B.T
    R = D @ D.T
    
    return make_lgssm(A, C, Q, R, m0, P0)


def make_controlled_lgssm(A, B, C, Q, R, m0, P0) -> Hierarchical:
    """
    LGSSM with a control input on the dynamics: x_t = A x_{t-1} + B u_t + v_t.

    The returned process takes u_t as its single control variable, so
    filters are driven with predict(u_t) or step(z_t, dynamic_controls=(u_t,)).
    """
    dynamic_map = ControlledLinearGaussian(A, _symmetric(Q), B)
    nx = dynamic_map.output_dim
    state = Markov(
        Conditional(Gaussian.standard(nx), dynamic_map),
        Gaussian(m0, _symmetric(P0)),
    )
    return Hierarchical(state, _measurement_layer(C, R))


def make_constant_velocity(
    delta: float = 0.1,
    q: float = 0.1,
    r: float = 0.1,
    m0=None,
    P0=None,
) -> Hierarchical:
    """
    Planar constant-velocity target with position measurements.

    State is [px, py, vx, vy]; measurement is [px, py].

    Args:
        delta: Sample time
        q: Process noise variance per state component
        r: Measurement noise variance per component
        m0: [4] Initial mean (default zeros)
        P0: [4, 4] Initial covariance (default identity)
    """
    A = np.array([
        [1.0, 0.0, delta, 0.0],
        [0.0, 1.0, 0.0, delta],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])
    C = np.array([
        [1.0, 0.0, 0.0, 0.0],
        [0.0, 1.0, 0.0, 0.0],
    ])
    m0 = np.zeros(4) if m0 is None else m0
    P0 = np.eye(4) if P0 is None else P0
    return make_lgssm(A, C, q * np.eye(4), r * np.eye(2), m0, P0)
