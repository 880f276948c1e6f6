"""
Stochastic process layers and their hierarchical composition.
"""

from .base import BaseProcess
from .markov import Markov
from .memoryless import Memoryless
from .hierarchical import Hierarchical

__all__ = [
    "BaseProcess",
    "Markov",
    "Memoryless",
    "Hierarchical",
]
