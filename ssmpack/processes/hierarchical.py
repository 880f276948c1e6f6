"""
Hierarchical process: an ordered stack of layers L_0, ..., L_d.

Layers are chained top-down. Layer 0 is conditioned only on its own control
variables; every deeper layer i takes the output of layer i-1 as its first
condition variable, followed by its own controls:

    o_0 = L_0.random(u_0...)
    o_i = L_i.random(o_{i-1}, u_i...)        i = 1, ..., d

Controls are passed to random()/likelihood() as one flat list and routed to
the layers by a per-layer arity table fixed at composition time.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numpy.random import Generator

from .base import BaseProcess
from ..distributions.base import compatible
from ..exceptions import ConstructionError, PreconditionError

logger = logging.getLogger(__name__)


class Hierarchical(BaseProcess):
    """
    Dynamic Bayesian network of stacked process layers.

    Example:
        >>> joint = Hierarchical(state_process, measurement_process)
        >>> joint.initialize()
        >>> x, z = joint.random()
    """

    def __init__(self, *processes: BaseProcess):
        """
        Args:
            *processes: Layers L_0, ..., L_d in top-down order

        Raises:
            ConstructionError: If no layer is given, a layer is not a process,
                or a layer's first condition variable does not match the
                random variable of the layer above it.
        """
        if not processes:
            raise ConstructionError("Hierarchical process needs at least one layer")
        for level, process in enumerate(processes):
            if not isinstance(process, BaseProcess):
                raise ConstructionError(
                    f"Layer {level} is {type(process).__name__}, not a process"
                )

        arities = [processes[0].arity]
        for level in range(1, len(processes)):
            above, process = processes[level - 1], processes[level]
            if process.arity < 1:
                raise ConstructionError(
                    f"Layer {level} takes no condition variable to chain to layer {level - 1}"
                )
            if not compatible(process.condition_specs[0], above.variable_spec):
                raise ConstructionError(
                    f"Layer {level} is conditioned on {process.condition_specs[0]} "
                    f"but layer {level - 1} produces {above.variable_spec}"
                )
            arities.append(process.arity - 1)

        self._processes = tuple(processes)
        self._arities = tuple(arities)
        self._offsets = tuple(int(o) for o in np.cumsum((0,) + self._arities))
        logger.debug("Composed %d-layer process with control arities %s",
                     len(self._processes), self._arities)

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    @property
    def depth(self) -> int:
        """Number of layers (d + 1 for layers L_0, ..., L_d)."""
        return len(self._processes)

    def __len__(self) -> int:
        return len(self._processes)

    @property
    def processes(self) -> Tuple[BaseProcess, ...]:
        return self._processes

    @property
    def arities(self) -> Tuple[int, ...]:
        """Number of (non-chaining) control variables of each layer."""
        return self._arities

    @property
    def n_controls(self) -> int:
        return self._offsets[-1]

    @property
    def arity(self) -> int:
        return self.n_controls

    @property
    def variable_spec(self):
        return None

    @property
    def condition_specs(self):
        specs = []
        for level, process in enumerate(self._processes):
            specs.extend(process.condition_specs[0 if level == 0 else 1:])
        return tuple(specs)

    def get_process(self, level: int) -> BaseProcess:
        """Return the layer at the given level."""
        if not 0 <= level < len(self._processes):
            raise IndexError(f"Level {level} out of range for {len(self)} layers")
        return self._processes[level]

    def split_controls(self, controls: Sequence) -> List[tuple]:
        """
        Route a flat control list to the layers.

        Args:
            controls: Controls of all layers, concatenated in layer order

        Returns:
            One tuple of controls per layer
        """
        if len(controls) != self.n_controls:
            raise PreconditionError(
                f"Hierarchical process expects {self.n_controls} control variable(s) "
                f"{self._arities}, got {len(controls)}"
            )
        return [
            tuple(controls[self._offsets[i]:self._offsets[i + 1]])
            for i in range(len(self._processes))
        ]

    # -------------------------------------------------------------------------
    # Process interface
    # -------------------------------------------------------------------------

    def initialize(self, *, rng: Optional[Generator] = None) -> tuple:
        """
        Initialize every layer in order.

        Returns:
            Tuple with the initial random variable of each layer
        """
        return tuple(process.initialize(rng=rng) for process in self._processes)

    def random(self, *controls, rng: Optional[Generator] = None) -> tuple:
        """
        Draw one step of every layer, top-down.

        Args:
            *controls: Flat list of controls of all layers (see split_controls)
            rng: Optional generator

        Returns:
            Tuple (o_0, ..., o_d) of this step's random variables
        """
        chunks = self.split_controls(controls)
        outputs = []
        for level, (process, chunk) in enumerate(zip(self._processes, chunks)):
            if level == 0:
                outputs.append(process.random(*chunk, rng=rng))
            else:
                outputs.append(process.random(outputs[-1], *chunk, rng=rng))
        return tuple(outputs)

    def likelihood(self, rvs: Sequence, *controls) -> float:
        """
        Joint likelihood of one step.

        Args:
            rvs: (o_0, ..., o_d) one random variable per layer
            *controls: Flat list of controls of all layers

        Returns:
            prod_i p_i(o_i | o_{i-1}, u_i...)
        """
        return float(np.exp(self.log_likelihood(rvs, *controls)))

    def log_likelihood(self, rvs: Sequence, *controls) -> float:
        """Joint log likelihood of one step (sum over layers)."""
        if len(rvs) != len(self._processes):
            raise PreconditionError(
                f"Expected {len(self._processes)} random variables, got {len(rvs)}"
            )
        chunks = self.split_controls(controls)
        total = 0.0
        for level, (process, chunk) in enumerate(zip(self._processes, chunks)):
            if level == 0:
                total += process.log_likelihood(rvs[0], *chunk)
            else:
                total += process.log_likelihood(rvs[level], rvs[level - 1], *chunk)
        return total

    def __repr__(self) -> str:
        layers = ", ".join(repr(p) for p in self._processes)
        return f"Hierarchical({layers})"
