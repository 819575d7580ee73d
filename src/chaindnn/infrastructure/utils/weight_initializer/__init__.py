"""
Weight initialization public API.

This module aggregates the supported weight initialization strategies
(Glorot uniform/normal and constants) and registers them into the global
`WeightInitializer` registry via import side effects.

Exports
-------
- WeightInitializer:
    The registry-backed initializer dispatcher.
- make_rng:
    Normalizes ``None | int | Generator`` into a `numpy.random.Generator`.
"""

from ._glorot import *
from ._constants import *
from ._base import WeightInitializer, make_rng

__all__ = [
    WeightInitializer.__name__,
    make_rng.__name__,
]
