"""
Constant weight initializers.

Provided initializers
---------------------
- ``zeros``:
    Fill an array with zeros (default for `Dense` biases).
- ``ones``:
    Fill an array with ones.

The generator argument is accepted for a uniform initializer signature and
ignored.
"""

import numpy as np

from ._base import WeightInitializer


@WeightInitializer.register_initializer("zeros")
def zeros(array: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """
    Fill `array` with zeros in-place and return it.
    """
    array.fill(0)
    return array


@WeightInitializer.register_initializer("ones")
def ones(array: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """
    Fill `array` with ones in-place and return it.
    """
    array.fill(1)
    return array
