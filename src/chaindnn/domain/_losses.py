"""
Loss function contracts.

A loss is the terminal computation of a training iteration: it turns the
network output and the labels into a scalar, and produces the initial
gradient handed to `Network.backward`.

Any intermediate value a loss needs in order to compute its gradient (for
example the Huber region mask) is returned explicitly from `forward` as an
opaque cache and passed back into `backward`, so loss objects carry no
hidden mutable state between calls.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional, Protocol, runtime_checkable

from .types._numpy import NDArrayLike


class LossResult(NamedTuple):
    """
    Scalar loss value plus the cache its gradient computation may reuse.

    Attributes
    ----------
    value : float
        The reduced scalar loss.
    cache : Optional[Any]
        Loss-specific intermediate state, consumed by `ILoss.backward`.
    """

    value: float
    cache: Optional[Any] = None


@runtime_checkable
class ILoss(Protocol):
    """
    Domain-level loss interface.
    """

    def forward(self, predictions: NDArrayLike, labels: NDArrayLike) -> LossResult:
        """
        Compute the loss and any cache needed by `backward`.
        """
        ...

    def loss(self, predictions: NDArrayLike, labels: NDArrayLike) -> float:
        """
        Compute only the scalar loss.
        """
        ...

    def backward(
        self,
        predictions: NDArrayLike,
        labels: NDArrayLike,
        cache: Optional[Any] = None,
    ) -> NDArrayLike:
        """
        Gradient of the loss with respect to the predictions.
        """
        ...
