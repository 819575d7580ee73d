"""
Softmax layer.

Normalizes each row of a ``(batch, classes)`` tensor into a probability
distribution over the last axis. The forward pass subtracts the per-row
maximum before exponentiating, so large logits never overflow, and caches
the *output* probabilities for backward. The caller receives a copy, so
editing the returned array does not alter the cached probabilities.

Backward modes
--------------
Softmax is almost always the terminal layer paired with
`CrossEntropyLoss`, whose backward already returns the combined
softmax + cross-entropy gradient ``probabilities - labels``. Two modes are
therefore provided:

- ``fused_with_cross_entropy=True`` (default):
    `backward` treats its input as ``probabilities - labels`` and returns it
    divided by the batch size. This is a contract with `CrossEntropyLoss`;
    it is not a Jacobian-vector product and gives wrong gradients for any
    other upstream gradient.
- ``fused_with_cross_entropy=False``:
    `backward` computes the full Jacobian-vector product
    ``s * (g - sum(g * s, axis=-1, keepdims=True))`` and is correct for any
    upstream loss.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from .._layer import Layer
from .._tensor import as_tensor
from ..module._serialization_core import register_layer
from ...domain._layer import LayerKind


def softmax(x: np.ndarray, axis: int = -1) -> np.ndarray:
    """
    Numerically stable softmax along `axis`.
    """
    shifted = x - np.max(x, axis=axis, keepdims=True)
    e = np.exp(shifted)
    return e / np.sum(e, axis=axis, keepdims=True)


@register_layer()
class Softmax(Layer):
    """
    Row-wise softmax over the last axis.

    Parameters
    ----------
    fused_with_cross_entropy : bool, optional
        Select the backward mode (see module docstring). Defaults to True.
    """

    kind = LayerKind.SOFTMAX

    def __init__(self, fused_with_cross_entropy: bool = True) -> None:
        super().__init__()
        self.fused_with_cross_entropy = bool(fused_with_cross_entropy)

    def forward(self, x: np.ndarray) -> np.ndarray:
        x = as_tensor(x)
        out = softmax(x, axis=-1).astype(x.dtype, copy=False)
        self._cache = out
        return out.copy()

    def backward(self, grad: np.ndarray) -> np.ndarray:
        """
        Propagate the gradient through the softmax.

        Raises
        ------
        ForwardNotCalledError
            If `forward` has not been called.
        ShapeMismatchError
            If `grad` does not match the cached output shape.
        """
        grad = as_tensor(grad)
        s = self._check_elementwise_grad(grad)

        if self.fused_with_cross_entropy:
            batch = s.shape[0] if s.ndim > 1 else 1
            return grad / batch

        dot = np.sum(grad * s, axis=-1, keepdims=True)
        return s * (grad - dot)

    def get_config(self) -> Dict[str, Any]:
        return {"fused_with_cross_entropy": self.fused_with_cross_entropy}
