"""
Range-Bearing State Space Model with Student-t measurement noise.

State: [px, py, vx, vy] - position and velocity
Observation: [range, bearing] with Student-t noise

The measurement is nonlinear and non-Gaussian, so this model is meant for
the particle filter.
"""

import numpy as np
from typing import Tuple

from ..distributions import Conditional, Gaussian, ParameterSpec, StudentT, VariableSpec
from ..maps import FunctionMap, LinearGaussian
from ..processes import Hierarchical, Markov, Memoryless


def _wrap_angle(a: np.ndarray) -> np.ndarray:
    """Wrap angle to [-pi, pi]."""
    return (a + np.pi) % (2.0 * np.pi) - np.pi


def _h_range_bearing(x: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """
    Range-bearing observation function.
    
    Args:
        x: [4] state with [px, py, vx, vy]
        eps: Small constant for numerical stability
        
    Returns:
        y: [2] observation [range, bearing]
    """
    px, py = x[0], x[1]
    r = np.sqrt(px**2 + py**2 + eps)
    th = np.arctan2(py, px)
    return np.array([r, th])


class RangeBearingStudentT(StudentT):
    """Student-t over [range, bearing] with the bearing residual wrapped to [-pi, pi]."""

    def residual(self, x: np.ndarray) -> np.ndarray:
        res = x - self.location
        res[1] = _wrap_angle(res[1])
        return res

    def random(self, *, rng=None) -> np.ndarray:
        y = super().random(rng=rng)
        y[1] = _wrap_angle(y[1])
        return y


def make_range_bearing_ssm(
    dt: float = 0.01,
    q_diag: float = 0.01,
    nu: float = 2.0,
    s_r: float = 0.01,
    s_th: float = 0.01,
    m0: Tuple[float, ...] = (1.0, 0.5, 0.01, 0.01),
    P0_diag: Tuple[float, ...] = (0.1, 0.1, 0.1, 0.1),
    eps: float = 1e-6,
) -> Hierarchical:
    """
    Range-Bearing SSM with Student-t measurement noise.
    
    State: x = [px, py, vx, vy]
    Dynamics: Constant velocity model (linear)
    Observation: [range, bearing] with Student-t noise
    
    Args:
        dt: Time step
        q_diag: Process noise diagonal value
        nu: Degrees of freedom for Student-t (nu=2 gives heavy tails)
        s_r: Scale for range noise
        s_th: Scale for bearing noise
        m0: Initial state mean (px, py, vx, vy)
        P0_diag: Initial state variance diagonal
        eps: Small constant for numerical stability
        
    Returns:
        Hierarchical(state, measurement) process
    """
    nx = 4
    
    # Dynamics: constant velocity
    A = np.array([
        [1, 0, dt, 0],
        [0, 1, 0, dt],
        [0, 0, 1, 0],
        [0, 0, 0, 1],
    ])
    Q = np.diag(np.full(nx, q_diag)) + eps * np.eye(nx)
    P0 = np.diag(np.array(P0_diag)) + eps * np.eye(nx)

    state = Markov(
        Conditional(Gaussian.standard(nx), LinearGaussian(A, Q)),
        Gaussian(np.array(m0), P0),
    )

    observation_map = FunctionMap(
        lambda x: _h_range_bearing(x, eps),
        1,
        parameter_spec=ParameterSpec("student_t", 2),
        condition_specs=(VariableSpec("real", nx),),
    )
    noise = RangeBearingStudentT(np.zeros(2), np.array([s_r, s_th]), df=nu)
    measurement = Memoryless(Conditional(noise, observation_map))

    return Hierarchical(state, measurement)
