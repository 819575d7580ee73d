"""
Trainable parameter interface definitions.

This module defines the domain-level interface for trainable parameters. A
parameter is a named tensor owned by exactly one layer, paired with a
gradient of identical shape and an optimizer state created from a shared
factory.
"""

from __future__ import annotations

from typing import Optional, Protocol, Tuple, runtime_checkable

from ._optimizers import IOptimizerFactory, IOptimizerState
from .types._numpy import NDArrayLike


@runtime_checkable
class IParameter(Protocol):
    """
    Domain-level interface for trainable parameters.

    Notes
    -----
    - `grad` is overwritten on every backward pass, never accumulated.
    - `state` is created once, on the first optimizer registration, and
      persists for the lifetime of the owning layer.
    """

    @property
    def name(self) -> str:
        """
        Name of the parameter within its layer (e.g. "weight", "bias").
        """
        ...

    @property
    def data(self) -> NDArrayLike:
        """
        Current parameter values.
        """
        ...

    @property
    def shape(self) -> Tuple[int, ...]:
        """
        Fixed parameter shape.
        """
        ...

    @property
    def grad(self) -> Optional[NDArrayLike]:
        """
        Most recent gradient, or None if backward has not run yet.
        """
        ...

    @property
    def state(self) -> Optional[IOptimizerState]:
        """
        Optimizer state, or None if no optimizer has been registered.
        """
        ...

    def set_grad(self, grad: NDArrayLike) -> None:
        """
        Overwrite the stored gradient.
        """
        ...

    def zero_grad(self) -> None:
        """
        Clear the stored gradient.
        """
        ...

    def register_optimizer(self, factory: IOptimizerFactory) -> None:
        """
        Create optimizer state from `factory` if none exists yet.
        """
        ...

    def apply_update(self) -> None:
        """
        Apply the optimizer state's update to the parameter values in-place.
        """
        ...
