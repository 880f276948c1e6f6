"""
Trajectory simulation and storage.
"""

import logging

import numpy as np
from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple
from numpy.random import Generator, default_rng

from ..processes.base import BaseProcess
from ..processes.hierarchical import Hierarchical

logger = logging.getLogger(__name__)


@dataclass
class Trajectory:
    """
    Container for simulated or recorded trajectory data.
    
    Attributes:
        levels: Per-layer outputs; levels[i] is [T, ...] for layer i
        initial: Per-layer initial values (x_0 for Markov layers)
        metadata: Optional dictionary for additional info
    """
    levels: Tuple[np.ndarray, ...]
    initial: Tuple[Any, ...]
    metadata: Optional[Dict[str, Any]] = None
    
    @property
    def T(self) -> int:
        """Number of time steps."""
        return self.levels[0].shape[0]

    @property
    def depth(self) -> int:
        """Number of layers."""
        return len(self.levels)
    
    @property
    def states(self) -> np.ndarray:
        """[T+1, ...] Top layer including its initial value (x_0, x_1, ..., x_T)."""
        return np.concatenate([np.asarray(self.initial[0])[np.newaxis], self.levels[0]])
    
    @property
    def observations(self) -> np.ndarray:
        """[T, ...] Bottom layer (y_1, ..., y_T)."""
        return self.levels[-1]
    
    def subset(self, start: int, end: int) -> "Trajectory":
        """
        Extract a subset of the trajectory.

        The initial value of each layer becomes its value at step start - 1
        (unchanged when start is 0).
        
        Args:
            start: Start time index (inclusive)
            end: End time index (exclusive)
            
        Returns:
            New Trajectory with subset of data
        """
        if start == 0:
            initial = self.initial
        else:
            initial = tuple(level[start - 1].copy() for level in self.levels)
        return Trajectory(
            levels=tuple(level[start:end].copy() for level in self.levels),
            initial=initial,
            metadata=self.metadata,
        )
    
    def save(self, path: str):
        """Save trajectory to .npz file."""
        arrays = {}
        for i, (level, init) in enumerate(zip(self.levels, self.initial)):
            arrays[f"level_{i}"] = level
            arrays[f"initial_{i}"] = np.asarray(init)
        np.savez(path, depth=self.depth, metadata=self.metadata, **arrays)
    
    @classmethod
    def load(cls, path: str) -> "Trajectory":
        """Load trajectory from .npz file."""
        data = np.load(path, allow_pickle=True)
        depth = int(data['depth'])
        metadata = data['metadata'].item() if 'metadata' in data else None
        return cls(
            levels=tuple(data[f"level_{i}"] for i in range(depth)),
            initial=tuple(data[f"initial_{i}"] for i in range(depth)),
            metadata=metadata,
        )


def simulate(
    process: BaseProcess,
    T: int,
    *controls,
    seed: Optional[int] = None,
    rng: Optional[Generator] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Trajectory:
    """
    Simulate a trajectory from a stochastic process.

    The process is initialized, then stepped T times with the same controls.
    
    Args:
        process: Hierarchical process (or a single layer)
        T: Number of time steps
        *controls: Control variables passed to every step
        seed: Random seed (ignored if rng is provided)
        rng: NumPy random generator (optional)
        metadata: Optional metadata to attach
        
    Returns:
        Trajectory object
    """
    if rng is None:
        rng = default_rng(seed)
    
    layered = isinstance(process, Hierarchical)
    initial = process.initialize(rng=rng)
    steps = process.random_n(T, *controls, rng=rng)
    if not layered:
        initial = (initial,)
        steps = [(step,) for step in steps]

    depth = len(initial)
    if steps:
        levels = tuple(
            np.array([step[i] for step in steps]) for i in range(depth)
        )
    else:
        # Shape empty levels from the initial values so states stays [1, ...]
        levels = tuple(
            np.empty((0,) + np.shape(init), dtype=np.asarray(init).dtype)
            for init in initial
        )
    logger.debug("Simulated %d steps of a %d-layer process", T, depth)
    
    return Trajectory(
        levels=levels,
        initial=tuple(initial),
        metadata=metadata,
    )


def simulate_batch(
    process: BaseProcess,
    T: int,
    n_trajectories: int,
    *controls,
    seed: Optional[int] = None,
) -> list:
    """
    Simulate multiple independent trajectories.
    
    Args:
        process: Hierarchical process (or a single layer)
        T: Number of time steps
        n_trajectories: Number of trajectories to simulate
        *controls: Control variables passed to every step
        seed: Random seed
        
    Returns:
        List of Trajectory objects
    """
    rng = default_rng(seed)
    
    trajectories = []
    for i in range(n_trajectories):
        traj = simulate(process, T, *controls, rng=rng, metadata={'trajectory_idx': i})
        trajectories.append(traj)
    
    return trajectories
