"""
Adam optimizer implementation.

This module provides the Adam optimizer factory and the per-parameter state
it manufactures. Each `AdamState` owns its first and second moment estimates
and its own timestep, so parameters never share mutable optimizer state.

Design notes
------------
- `Adam` is configuration-only and immutable; a single instance may be
  registered with every layer of a network.
- `AdamState.update` returns the delta to subtract from the parameter; the
  parameter write itself is performed by `Parameter.apply_update`.
- Moments are allocated with the parameter shape at creation time and start
  at zero. The timestep starts at 1 and increments after every update.

This module contains only Adam. Other optimizers (e.g., SGD) live in separate
modules under the optimizers package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np

from ...domain._optimizers import IOptimizerFactory, IOptimizerState
from .._tensor import require_shape


class AdamState(IOptimizerState):
    """
    Per-parameter Adam update rule.

    Update rule
    -----------
    Let ``g_t`` be the gradient at step ``t``:

        m_t = beta1 * m_{t-1} + (1 - beta1) * g_t
        v_t = beta2 * v_{t-1} + (1 - beta2) * (g_t ** 2)

        m_hat = m_t / (1 - beta1^t)
        v_hat = v_t / (1 - beta2^t)

        delta = lr * m_hat / (sqrt(v_hat) + eps)

    Attributes
    ----------
    m : np.ndarray
        First-moment running average.
    v : np.ndarray
        Second-moment running average.
    t : int
        Timestep used for the next update (starts at 1).
    """

    def __init__(
        self,
        shape: Tuple[int, ...],
        dtype: Any,
        *,
        lr: float,
        betas: Tuple[float, float],
        eps: float,
    ) -> None:
        self._shape = tuple(int(d) for d in shape)
        self.lr = float(lr)
        self.betas = (float(betas[0]), float(betas[1]))
        self.eps = float(eps)

        self.m = np.zeros(self._shape, dtype=dtype)
        self.v = np.zeros(self._shape, dtype=dtype)
        self.t = 1

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._shape

    def update(self, grad: np.ndarray) -> np.ndarray:
        """
        Return the Adam delta for one gradient and advance the timestep.

        Raises
        ------
        ShapeMismatchError
            If `grad` does not have the shape this state was created for.
        """
        require_shape(grad, self._shape, "AdamState.update")
        b1, b2 = self.betas
        t = self.t

        # write moments in-place
        self.m *= b1
        self.m += (1.0 - b1) * grad
        self.v *= b2
        self.v += (1.0 - b2) * (grad * grad)

        # bias correction
        m_hat = self.m / (1.0 - b1**t)
        v_hat = self.v / (1.0 - b2**t)

        self.t += 1
        return self.lr * (m_hat / (np.sqrt(v_hat) + self.eps))


@dataclass(frozen=True)
class Adam(IOptimizerFactory):
    """
    Adam optimizer factory.

    Parameters
    ----------
    lr : float, optional
        Learning rate. Must be positive. Defaults to 1e-3.
    betas : tuple[float, float], optional
        Exponential decay rates for the first and second moments.
        Each must be in (0, 1). Defaults to (0.9, 0.999).
    eps : float, optional
        Numerical stability epsilon added to the denominator. Must be positive.
        Defaults to 1e-8.
    """

    lr: float = 1e-3
    betas: Tuple[float, float] = (0.9, 0.999)
    eps: float = 1e-8

    def __post_init__(self) -> None:
        """
        Validate hyperparameters.

        Raises
        ------
        ValueError
            If any hyperparameter is outside its valid range.
        """
        b1, b2 = float(self.betas[0]), float(self.betas[1])
        if float(self.lr) <= 0.0:
            raise ValueError(f"lr must be > 0, got {self.lr}")
        if not (0.0 < b1 < 1.0) or not (0.0 < b2 < 1.0):
            raise ValueError(f"betas must be in (0,1), got {self.betas}")
        if float(self.eps) <= 0.0:
            raise ValueError(f"eps must be > 0, got {self.eps}")

    def create_state(self, shape: Tuple[int, ...], dtype: Any) -> AdamState:
        """
        Build a fresh Adam state (zero moments, t=1) for one parameter.
        """
        return AdamState(shape, dtype, lr=self.lr, betas=self.betas, eps=self.eps)
