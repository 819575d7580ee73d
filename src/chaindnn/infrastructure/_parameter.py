"""
Concrete trainable parameter implementation.

This module defines `Parameter`, the infrastructure-level implementation of
the domain contract `IParameter`. A `Parameter` wraps a NumPy array that is
optimized during training, together with:

- the gradient produced by the most recent backward pass, and
- the optimizer state that converts that gradient into an update.

Design notes
------------
- The gradient is *overwritten* by each backward pass. Gradients are never
  accumulated across iterations because the network is a strict chain and
  every parameter receives exactly one contribution per pass.
- Optimizer state is created lazily on the first `register_optimizer` call
  and then kept for the parameter's lifetime; re-registering is a no-op.
- Updates are written into the existing array object so that references
  held elsewhere (e.g. by a layer attribute) stay valid.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

import numpy as np

from ..domain._errors import MissingGradientError, MissingOptimizerError
from ..domain._optimizers import IOptimizerFactory, IOptimizerState
from ..domain._parameter import IParameter
from ._tensor import require_shape


class Parameter(IParameter):
    """
    Trainable tensor with gradient and optimizer-state bookkeeping.

    Parameters
    ----------
    name : str
        Name of the parameter within its owning layer.
    data : np.ndarray
        Initial values. The shape is fixed from here on.

    Attributes
    ----------
    owner : str
        Name of the owning layer, used in error messages.
    """

    def __init__(self, name: str, data: np.ndarray, *, owner: str = "Layer") -> None:
        self._name = str(name)
        self._data = np.array(data, copy=True)
        self._grad: Optional[np.ndarray] = None
        self._state: Optional[IOptimizerState] = None
        self.owner = owner

    @property
    def name(self) -> str:
        return self._name

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self._data.shape)

    @property
    def dtype(self) -> Any:
        return self._data.dtype

    @property
    def size(self) -> int:
        return int(self._data.size)

    @property
    def grad(self) -> Optional[np.ndarray]:
        """
        Return the gradient stored by the most recent backward pass.

        Returns
        -------
        Optional[np.ndarray]
            The gradient, or None if backward has not run (or it was cleared).
        """
        return self._grad

    @property
    def state(self) -> Optional[IOptimizerState]:
        return self._state

    def set_grad(self, grad: np.ndarray) -> None:
        """
        Overwrite the stored gradient.

        Parameters
        ----------
        grad : np.ndarray
            New gradient. Must have exactly the parameter's shape.

        Raises
        ------
        ShapeMismatchError
            If `grad.shape` differs from the parameter shape.
        """
        require_shape(grad, self.shape, f"{self.owner}.{self._name}.set_grad")
        self._grad = grad

    def zero_grad(self) -> None:
        """
        Clear the stored gradient.
        """
        self._grad = None

    def copy_from(self, values: np.ndarray) -> None:
        """
        Overwrite the parameter values in-place.

        Raises
        ------
        ShapeMismatchError
            If `values` does not match the parameter shape.
        """
        values = np.asarray(values)
        require_shape(values, self.shape, f"{self.owner}.{self._name}.copy_from")
        self._data[...] = values

    def register_optimizer(self, factory: IOptimizerFactory) -> None:
        """
        Create optimizer state from `factory` unless it already exists.

        Notes
        -----
        State is created exactly once. Registering a second factory later
        does not replace the existing state, so accumulated statistics
        (e.g. Adam moments) survive repeated registration.
        """
        if self._state is None:
            self._state = factory.create_state(self.shape, self._data.dtype)

    def apply_update(self) -> None:
        """
        Subtract the optimizer's delta from the parameter values.

        Raises
        ------
        MissingOptimizerError
            If no optimizer state has been registered.
        MissingGradientError
            If no gradient is available.
        """
        if self._state is None:
            raise MissingOptimizerError(self.owner, self._name)
        if self._grad is None:
            raise MissingGradientError(f"{self.owner}.{self._name}")

        delta = self._state.update(self._grad)
        self._data -= np.asarray(delta, dtype=self._data.dtype)

    def __repr__(self) -> str:
        return (
            f"Parameter(name={self._name!r}, shape={self.shape}, "
            f"dtype={self._data.dtype}, has_grad={self._grad is not None})"
        )
