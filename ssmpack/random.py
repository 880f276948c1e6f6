"""
Thread-scoped pseudo-random generator.

Each thread owns an independent NumPy Generator, created lazily from OS
entropy on first use. Seeding affects only the calling thread, so worker
threads never share (or correlate) a stream. Every sampling operation in
ssmpack also accepts an explicit ``rng`` which bypasses this state.
"""

import threading
from typing import Optional

import numpy as np
from numpy.random import Generator, default_rng

_local = threading.local()


def get_generator() -> Generator:
    """Return the calling thread's generator, creating it if needed."""
    rng = getattr(_local, "generator", None)
    if rng is None:
        rng = default_rng()
        _local.generator = rng
    return rng


def set_seed(seed: Optional[int]) -> Generator:
    """
    Reseed the calling thread's generator.

    Args:
        seed: Seed for ``numpy.random.default_rng`` (None draws from entropy)

    Returns:
        The new generator
    """
    _local.generator = default_rng(seed)
    return _local.generator


def set_random_seed() -> Generator:
    """Reseed the calling thread's generator from OS entropy."""
    return set_seed(None)


def resolve(rng: Optional[Generator]) -> Generator:
    """Return ``rng`` if given, otherwise the thread-scoped generator."""
    if rng is None:
        return get_generator()
    return rng


def spawn(n: int, seed: Optional[int] = None) -> list:
    """
    Create ``n`` statistically independent generators.

    Useful to hand one generator to each worker thread.

    Args:
        n: Number of generators
        seed: Root seed (None draws from entropy)

    Returns:
        List of n Generators
    """
    children = np.random.SeedSequence(seed).spawn(n)
    return [default_rng(s) for s in children]
