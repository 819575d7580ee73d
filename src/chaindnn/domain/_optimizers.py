"""
Domain-level optimizer contracts for ChainDNN.

Optimization is split into two roles:

- An **optimizer factory** (`IOptimizerFactory`) holds hyperparameters only.
  It is immutable and may be shared by every layer of a network.
- An **optimizer state** (`IOptimizerState`) is manufactured by the factory,
  one per trainable parameter. It owns whatever decaying statistics the
  update rule needs (momentum buffers, Adam moments, a timestep) and turns a
  gradient into the delta that is subtracted from the parameter.

Notes
-----
- Domain contracts are backend-agnostic and must not depend on NumPy.
- States are never shared between parameters; sharing the factory is safe
  because it carries no mutable state.
"""

from __future__ import annotations

from typing import Any, Protocol, Tuple, runtime_checkable

from .types._numpy import NDArrayLike


@runtime_checkable
class IOptimizerState(Protocol):
    """
    Per-parameter update rule.

    Required members
    ----------------
    - `shape` is the parameter shape fixed at creation.
    - `update(grad)` returns the delta to subtract from the parameter.
    """

    @property
    def shape(self) -> Tuple[int, ...]:
        """
        Shape of the parameter this state was created for.
        """
        ...

    def update(self, grad: NDArrayLike) -> NDArrayLike:
        """
        Consume one gradient and return the parameter delta.

        Implementations must reject gradients whose shape differs from
        `shape`, and must advance any internal statistics exactly once per
        call.
        """
        ...


@runtime_checkable
class IOptimizerFactory(Protocol):
    """
    Configuration-only optimizer description.

    A factory manufactures independent `IOptimizerState` instances on demand,
    shaped to match the parameter they will update.
    """

    @property
    def lr(self) -> float:
        """
        Base learning rate.
        """
        ...

    def create_state(self, shape: Tuple[int, ...], dtype: Any) -> IOptimizerState:
        """
        Build a fresh optimizer state for a parameter of the given shape.

        Parameters
        ----------
        shape : tuple[int, ...]
            Shape of the parameter (and of every gradient it will receive).
        dtype : Any
            Floating dtype of the parameter.
        """
        ...
