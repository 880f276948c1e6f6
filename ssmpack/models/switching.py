"""
Switching-acceleration model.

A Markov chain over K regimes selects an additive acceleration b_k that
drives a linear Gaussian state, which is observed through a linear Gaussian
measurement:

    k_t ~ Categorical(Pi[:, k_{t-1}])
    x_t = A @ x_{t-1} + b_{k_t} + v_t,  v_t ~ N(0, Q)
    y_t = C @ x_t + w_t,                w_t ~ N(0, R)
"""

import numpy as np

from ..distributions import Categorical, Conditional, Gaussian
from ..maps import LinearGaussian, SwitchingAdditiveLinearGaussian, TransitionMatrix
from ..processes import Hierarchical, Markov, Memoryless


def make_switching_lgssm(
    transition: np.ndarray,
    initial_probabilities: np.ndarray,
    A: np.ndarray,
    Q: np.ndarray,
    biases: np.ndarray,
    C: np.ndarray,
    R: np.ndarray,
    m0: np.ndarray,
    P0: np.ndarray,
) -> Hierarchical:
    """
    Three-layer Hierarchical(regime, state, measurement) process.

    Args:
        transition: [K, K] Column-stochastic regime transition matrix
        initial_probabilities: [K] Initial regime probabilities
        A: [nx, nx] State transition matrix
        Q: [nx, nx] Process noise covariance
        biases: [nx, K] Additive term per regime
        C: [ny, nx] Observation matrix
        R: [ny, ny] Observation noise covariance
        m0: [nx] Initial state mean
        P0: [nx, nx] Initial state covariance

    Returns:
        Hierarchical process producing (k_t, x_t, y_t) per step
    """
    switching_map = TransitionMatrix(transition)
    regime = Markov(
        Conditional(Categorical.uniform(switching_map.n_states), switching_map),
        Categorical(initial_probabilities),
    )

    state_map = SwitchingAdditiveLinearGaussian(A, Q, biases)
    nx = state_map.output_dim
    state = Markov(Conditional(Gaussian.standard(nx), state_map), Gaussian(m0, P0))

    measurement_map = LinearGaussian(C, R)
    measurement = Memoryless(
        Conditional(Gaussian.standard(measurement_map.output_dim), measurement_map)
    )
    return Hierarchical(regime, state, measurement)


def make_switching_acceleration(delta: float = 1.0) -> Hierarchical:
    """
    One-dimensional position/velocity target with three acceleration regimes
    (none, forward, backward) and noisy position measurements.
    """
    transition = np.array([
        [0.8, 0.1, 0.1],
        [0.1, 0.8, 0.1],
        [0.1, 0.1, 0.8],
    ])
    A = np.array([[1.0, delta], [0.0, 1.0]])
    accelerations = np.array([
        [0.0, delta * delta / 2, -delta * delta / 2],
        [0.0, delta, -delta],
    ])
    return make_switching_lgssm(
        transition,
        np.array([0.4, 0.3, 0.3]),
        A,
        0.1 * np.eye(2),
        accelerations,
        np.array([[1.0, 0.0]]),
        np.array([[0.1]]),
        np.zeros(2),
        np.eye(2),
    )
