"""
Optimizer primitives for ChainDNN.

Convenience import location for the optimizer factories and the
per-parameter states they produce. Implementations live in the
`optimizers` package, one module per algorithm.
"""

from .optimizers._sgd import SGD, SGDState
from .optimizers._adam import Adam, AdamState

__all__ = [
    SGD.__name__,
    SGDState.__name__,
    Adam.__name__,
    AdamState.__name__,
]
