"""
Stochastic Gradient Descent (SGD) optimizer implementation.

This module provides the SGD optimizer factory and the per-parameter state
it manufactures.

Design notes
------------
- `SGD` is configuration-only: it stores hyperparameters and creates one
  `SGDState` per parameter through `create_state`.
- `SGDState.update` returns the delta to subtract from the parameter; it
  never touches the parameter itself.
- With ``momentum == 0`` the state is stateless beyond the learning rate and
  the delta is simply ``lr * grad``. With momentum, the state keeps a velocity
  buffer shaped like the parameter.

This module contains only SGD. Other optimizers (e.g., Adam) live in separate
modules under the optimizers package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from ...domain._optimizers import IOptimizerFactory, IOptimizerState
from .._tensor import require_shape


class SGDState(IOptimizerState):
    """
    Per-parameter SGD update rule.

    Update rule
    -----------
    Without momentum:

        delta = lr * g

    With momentum ``mu``:

        velocity = mu * velocity + g
        delta    = lr * velocity
    """

    def __init__(
        self,
        shape: Tuple[int, ...],
        dtype: Any,
        *,
        lr: float,
        momentum: float = 0.0,
    ) -> None:
        self._shape = tuple(int(d) for d in shape)
        self.lr = float(lr)
        self.momentum = float(momentum)
        self.velocity: Optional[np.ndarray] = (
            np.zeros(self._shape, dtype=dtype) if self.momentum != 0.0 else None
        )

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._shape

    def update(self, grad: np.ndarray) -> np.ndarray:
        """
        Return the SGD delta for one gradient.

        Raises
        ------
        ShapeMismatchError
            If `grad` does not have the shape this state was created for.
        """
        require_shape(grad, self._shape, "SGDState.update")

        if self.velocity is None:
            return grad * self.lr

        self.velocity *= self.momentum
        self.velocity += grad
        return self.lr * self.velocity


@dataclass(frozen=True)
class SGD(IOptimizerFactory):
    """
    Stochastic Gradient Descent (SGD) optimizer factory.

    Parameters
    ----------
    lr : float, optional
        Learning rate. Must be positive. Defaults to 1e-3.
    momentum : float, optional
        Momentum coefficient in [0, 1). Defaults to 0.0 (plain SGD).

    Notes
    -----
    - Instances are immutable and may be shared by every layer of a network.
    - Each call to `create_state` returns an independent `SGDState`.
    """

    lr: float = 1e-3
    momentum: float = 0.0

    def __post_init__(self) -> None:
        """
        Validate hyperparameters.

        Raises
        ------
        ValueError
            If ``lr <= 0`` or ``momentum`` is outside [0, 1).
        """
        if float(self.lr) <= 0.0:
            raise ValueError(f"lr must be > 0, got {self.lr}")
        if not (0.0 <= float(self.momentum) < 1.0):
            raise ValueError(f"momentum must be in [0, 1), got {self.momentum}")

    def create_state(self, shape: Tuple[int, ...], dtype: Any) -> SGDState:
        """
        Build the SGD state for a parameter of the given shape.
        """
        return SGDState(shape, dtype, lr=self.lr, momentum=self.momentum)
