"""
Layer interface definitions.

This module defines the closed set of layer variants supported by ChainDNN
(`LayerKind`) and the structural contract every layer implements (`ILayer`).

A network is a strict linear chain, so every layer consumes exactly one
tensor in `forward` and exactly one upstream gradient in `backward`. The
variant set is closed: each `LayerKind` maps to a single concrete layer
class, and code that dispatches on layer type (serialization, shape
chaining) does so over this enumeration.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional, Protocol, Tuple, runtime_checkable

from ._optimizers import IOptimizerFactory
from ._parameter import IParameter
from .types._numpy import NDArrayLike


class LayerKind(str, Enum):
    """
    Tag identifying each supported layer variant.
    """

    DENSE = "dense"
    RELU = "relu"
    SOFTMAX = "softmax"


@runtime_checkable
class ILayer(Protocol):
    """
    Domain-level layer interface.

    Call-order contract
    -------------------
    - `forward` must precede `backward` within a training iteration; it
      caches whatever `backward` needs (the input, or derived state).
    - `backward` writes fresh gradients into every parameter (overwriting the
      previous ones) and returns the gradient for the previous layer.
    - `step` applies each parameter's optimizer state to its current gradient
      and leaves the gradient in place.
    """

    @property
    def kind(self) -> LayerKind:
        """
        Variant tag of this layer.
        """
        ...

    @property
    def trainable(self) -> bool:
        """
        Whether this layer owns at least one parameter.
        """
        ...

    def forward(self, x: NDArrayLike) -> NDArrayLike:
        """
        Compute the layer output and cache state for backward.
        """
        ...

    def backward(self, grad: NDArrayLike) -> NDArrayLike:
        """
        Propagate `grad` to the previous layer, storing parameter gradients.
        """
        ...

    def step(self) -> None:
        """
        Update all parameters from their current gradients.
        """
        ...

    def register_optimizer(self, factory: IOptimizerFactory) -> None:
        """
        Create per-parameter optimizer state from a shared factory.
        """
        ...

    def parameters(self) -> Iterable[IParameter]:
        """
        Return the trainable parameters owned by this layer.
        """
        ...

    def output_features(self, in_features: Optional[int]) -> Optional[int]:
        """
        Feature width produced for a given input width (None if unknown).
        """
        ...

    @property
    def output_shape(self) -> Tuple[Optional[int], Optional[int]]:
        """
        `(batch, features)` this layer produces, None where unconstrained.
        """
        ...
