"""
Dense (fully-connected, affine) layer.

`Dense` computes ``y = x @ W + b`` for a batch of row vectors. Weights are
stored as ``(in_features, out_features)`` so that the forward pass is a single
contraction over the feature axis, and the bias is a ``(1, out_features)`` row
broadcast across the batch.

Design Notes
------------
- Inputs must be 2D tensors of shape ``(batch, in_features)``.
- Weights are drawn at construction time from a registered initializer
  (Glorot uniform by default) using an explicit, seedable generator.
- The bias is zero-initialized.
- When `batch_size` is given, every forward input must carry exactly that
  many rows; when it is None, any batch size is accepted.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

from .._layer import Layer
from .._parameter import Parameter
from .._tensor import DEFAULT_DTYPE, as_tensor, require_2d, require_shape
from ..module._serialization_core import register_layer
from ..utils.weight_initializer import WeightInitializer, make_rng
from ...domain._errors import ShapeMismatchError
from ...domain._layer import LayerKind
from ...domain.utils._weight_initialization import InitializationScheme


@register_layer()
class Dense(Layer):
    """
    Fully-connected affine layer.

    Parameters
    ----------
    in_features : int
        Number of input features per example.
    out_features : int
        Number of output features per example.
    bias : bool, optional
        If True, include a learnable bias. Defaults to True.
    batch_size : Optional[int], optional
        Fixed batch size to enforce, or None to accept any. Defaults to None.
    initializer : str | InitializationScheme, optional
        Registered weight-initializer name. Defaults to ``"glorot_uniform"``.
    rng : None | int | numpy.random.Generator, optional
        Source of randomness for the weight initializer.
    dtype : numpy dtype, optional
        Parameter dtype. Defaults to float32.

    Raises
    ------
    ValueError
        If a dimension is not a positive integer.
    UninitializedDistributionError
        If `initializer` is not a registered scheme.
    """

    kind = LayerKind.DENSE

    def __init__(
        self,
        in_features: int,
        out_features: int,
        bias: bool = True,
        *,
        batch_size: Optional[int] = None,
        initializer: Union[str, InitializationScheme] = InitializationScheme.GLOROT_UNIFORM,
        rng: Any = None,
        dtype: Any = DEFAULT_DTYPE,
    ) -> None:
        super().__init__()
        if int(in_features) <= 0 or int(out_features) <= 0:
            raise ValueError("in_features and out_features must be positive integers")
        if batch_size is not None and int(batch_size) <= 0:
            raise ValueError("batch_size must be a positive integer or None")

        self.in_features = int(in_features)
        self.out_features = int(out_features)
        self._batch_size = int(batch_size) if batch_size is not None else None
        self._use_bias = bool(bias)
        self.dtype = np.dtype(dtype)

        init = WeightInitializer(initializer)
        self.initializer = init.name

        w = np.empty((self.in_features, self.out_features), dtype=self.dtype)
        init(w, make_rng(rng))
        self.weight = Parameter("weight", w, owner="Dense")
        self.register_parameter("weight", self.weight)

        self.bias: Optional[Parameter] = None
        if self._use_bias:
            self.bias = Parameter(
                "bias", np.zeros((1, self.out_features), dtype=self.dtype), owner="Dense"
            )
            self.register_parameter("bias", self.bias)

    @property
    def batch_size(self) -> Optional[int]:
        return self._batch_size

    @property
    def input_features(self) -> Optional[int]:
        return self.in_features

    def forward(self, x: np.ndarray) -> np.ndarray:
        """
        Apply the affine transformation and cache the input.

        Parameters
        ----------
        x : np.ndarray
            Input of shape ``(batch, in_features)``.

        Returns
        -------
        np.ndarray
            Output of shape ``(batch, out_features)``.

        Raises
        ------
        ShapeMismatchError
            If `x` is not 2D, its feature dimension differs from
            `in_features`, or its batch dimension differs from a fixed
            `batch_size`.
        """
        x = as_tensor(x, self.dtype)
        require_2d(x, "Dense.forward")
        batch, feats = x.shape
        if feats != self.in_features:
            raise ShapeMismatchError(
                "Dense.forward",
                expected=(batch, self.in_features),
                got=x.shape,
                detail="input feature dimension does not match weights",
            )
        if self._batch_size is not None and batch != self._batch_size:
            raise ShapeMismatchError(
                "Dense.forward",
                expected=(self._batch_size, self.in_features),
                got=x.shape,
                detail="batch dimension does not match the configured batch_size",
            )

        self._cache = x.copy()
        out = x @ self.weight.data
        if self.bias is not None:
            out = out + self.bias.data
        return out

    def backward(self, grad: np.ndarray) -> np.ndarray:
        """
        Store weight/bias gradients and return the input gradient.

        Computes::

            dW = x.T @ grad           (in_features, out_features)
            db = sum(grad, axis=0)    (1, out_features)
            dx = grad @ W.T           (batch, in_features)

        Raises
        ------
        ForwardNotCalledError
            If `forward` has not been called.
        ShapeMismatchError
            If `grad` is not ``(batch, out_features)`` for the cached batch.
        """
        x = self._cached()
        grad = as_tensor(grad, self.dtype)
        require_shape(grad, (x.shape[0], self.out_features), "Dense.backward")

        self.weight.set_grad(x.T @ grad)
        if self.bias is not None:
            self.bias.set_grad(grad.sum(axis=0, keepdims=True))
        return grad @ self.weight.data.T

    def output_features(self, in_features: Optional[int]) -> Optional[int]:
        return self.out_features

    @property
    def output_shape(self) -> Tuple[Optional[int], Optional[int]]:
        return (self._batch_size, self.out_features)

    def get_config(self) -> Dict[str, Any]:
        return {
            "in_features": self.in_features,
            "out_features": self.out_features,
            "bias": self._use_bias,
            "batch_size": self._batch_size,
            "initializer": self.initializer,
            "dtype": self.dtype.name,
        }
