"""
Rectified linear unit layer.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from .._layer import Layer
from .._tensor import as_tensor
from ..module._serialization_core import register_layer
from ...domain._layer import LayerKind


@register_layer()
class Relu(Layer):
    """
    Elementwise ``max(0, x)``.

    Backward passes the upstream gradient where the cached *input* satisfies
    ``x >= -tolerance`` and zeroes it elsewhere.

    Parameters
    ----------
    tolerance : float, optional
        Non-negative slack on the gradient gate. The default 0.0 gives the
        standard rule ``x >= 0``. A small positive value (e.g. 0.01) lets
        gradient through for inputs slightly below zero, which keeps units
        near the kink from going dead.

    Raises
    ------
    ValueError
        If `tolerance` is negative.
    """

    kind = LayerKind.RELU

    def __init__(self, tolerance: float = 0.0) -> None:
        super().__init__()
        if float(tolerance) < 0.0:
            raise ValueError(f"tolerance must be >= 0, got {tolerance}")
        self.tolerance = float(tolerance)

    def forward(self, x: np.ndarray) -> np.ndarray:
        x = as_tensor(x)
        self._cache = x.copy()
        return np.maximum(x, 0).astype(x.dtype, copy=False)

    def backward(self, grad: np.ndarray) -> np.ndarray:
        """
        Gate `grad` by the cached input.

        Raises
        ------
        ForwardNotCalledError
            If `forward` has not been called.
        ShapeMismatchError
            If `grad` does not match the cached input shape.
        """
        grad = as_tensor(grad)
        x = self._check_elementwise_grad(grad)
        return np.where(x >= -self.tolerance, grad, 0).astype(grad.dtype, copy=False)

    def get_config(self) -> Dict[str, Any]:
        return {"tolerance": self.tolerance}
