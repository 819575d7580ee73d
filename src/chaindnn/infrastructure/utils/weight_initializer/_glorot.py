"""
Glorot (Xavier) weight initializers.

Registered variants
-------------------
- ``glorot_uniform`` (alias ``xavier_uniform``):
    ``U(-limit, +limit)`` with ``limit = sqrt(6 / (fan_in + fan_out))``.
- ``glorot_normal`` (alias ``xavier``):
    ``N(0, std)`` with ``std = sqrt(2 / (fan_in + fan_out))``.

Notes
-----
- Fan-in and fan-out come from ``_calculate_fan_in_and_fan_out`` using the
  ``(in_features, out_features)`` weight layout.
- A non-positive ``fan_in + fan_out`` has no valid distribution and raises
  `UninitializedDistributionError`.
"""

import math

import numpy as np

from ._base import WeightInitializer
from ....domain._errors import UninitializedDistributionError
from ....domain.utils._weight_initialization import _calculate_fan_in_and_fan_out


def _fan_sum(array: np.ndarray, scheme: str) -> int:
    fan_in, fan_out = _calculate_fan_in_and_fan_out(tuple(array.shape))
    total = int(fan_in) + int(fan_out)
    if total <= 0:
        raise UninitializedDistributionError(
            scheme, f"fan_in + fan_out must be positive, got {total}"
        )
    return total


@WeightInitializer.register_initializer("glorot_uniform")
@WeightInitializer.register_initializer("xavier_uniform")
def glorot_uniform(array: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """
    Fill `array` in-place from the Glorot uniform distribution.

    Parameters
    ----------
    array:
        The array to initialize in-place.
    rng:
        Random generator to draw from.

    Returns
    -------
    np.ndarray
        The initialized array (same object).
    """
    limit = math.sqrt(6.0 / float(_fan_sum(array, "glorot_uniform")))
    array[...] = rng.uniform(-limit, limit, size=array.shape)
    return array


@WeightInitializer.register_initializer("glorot_normal")
@WeightInitializer.register_initializer("xavier")
def glorot_normal(array: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """
    Fill `array` in-place from the Glorot normal distribution.

    Returns
    -------
    np.ndarray
        The initialized array (same object).
    """
    std = math.sqrt(2.0 / float(_fan_sum(array, "glorot_normal")))
    array[...] = rng.normal(0.0, std, size=array.shape)
    return array
