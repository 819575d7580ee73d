"""
Infrastructure layer base class.

This module provides `Layer`, the concrete base satisfying the domain-level
`ILayer` protocol. It implements the conveniences shared by every variant:

- parameter registration and storage (insertion-ordered)
- optimizer registration and the parameter-update `step`
- input-cache bookkeeping and the "forward before backward" check
- `__call__` forwarding to `forward`
- config hooks used by checkpointing

Concrete variants (`Dense`, `Relu`, `Softmax`) subclass it, set their
`kind` tag and register themselves with `@register_layer()`.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple

import numpy as np

from ..domain._errors import ForwardNotCalledError
from ..domain._layer import ILayer, LayerKind
from ..domain._optimizers import IOptimizerFactory
from ._parameter import Parameter
from ._tensor import require_same_shape


class Layer(ILayer):
    """
    Base class for all layers.

    Attributes
    ----------
    kind : ClassVar[LayerKind]
        Variant tag; set by each concrete subclass.
    _parameters : Dict[str, Parameter]
        Parameters owned by this layer, in declaration order.
    _cache : Optional[np.ndarray]
        Tensor cached by the last `forward` (input or derived state).

    Notes
    -----
    - Parameter-free layers inherit no-op `register_optimizer` and `step`
      since both simply iterate over an empty parameter mapping.
    - `forward` is expected to be a pure function of its input and the current
      parameters; the only side effect is refreshing the cache.
    """

    kind: ClassVar[LayerKind]

    def __init__(self) -> None:
        self._parameters: Dict[str, Parameter] = {}
        self._cache: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------
    def register_parameter(self, name: str, param: Optional[Parameter]) -> None:
        """
        Register a parameter under `name`; None is ignored.
        """
        if param is None:
            return
        self._parameters[name] = param

    @property
    def trainable(self) -> bool:
        return bool(self._parameters)

    def parameters(self) -> List[Parameter]:
        return list(self._parameters.values())

    def named_parameters(self, prefix: str = "") -> Iterator[Tuple[str, Parameter]]:
        """
        Yield ``(qualified_name, parameter)`` pairs.

        Parameters
        ----------
        prefix : str
            Prepended as ``"<prefix>.<name>"`` when non-empty.
        """
        base = prefix + "." if prefix else ""
        for name, p in self._parameters.items():
            yield f"{base}{name}", p

    def zero_grad(self) -> None:
        for p in self._parameters.values():
            p.zero_grad()

    def register_optimizer(self, factory: IOptimizerFactory) -> None:
        """
        Create one optimizer state per parameter from the shared `factory`.

        State that already exists is kept (see `Parameter.register_optimizer`).
        """
        for p in self._parameters.values():
            p.register_optimizer(factory)

    def step(self) -> None:
        """
        Apply every parameter's optimizer update to its current gradient.

        Raises
        ------
        MissingOptimizerError
            If a parameter has no optimizer state.
        MissingGradientError
            If a parameter has not received a gradient yet.
        """
        for p in self._parameters.values():
            p.apply_update()

    # ------------------------------------------------------------------
    # Forward / backward
    # ------------------------------------------------------------------
    def forward(self, x: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def backward(self, grad: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def __call__(self, x: np.ndarray) -> np.ndarray:
        return self.forward(x)

    def _cached(self) -> np.ndarray:
        """
        Return the forward cache, or raise if forward has not run.
        """
        if self._cache is None:
            raise ForwardNotCalledError(type(self).__name__)
        return self._cache

    def _check_elementwise_grad(self, grad: np.ndarray) -> np.ndarray:
        cached = self._cached()
        require_same_shape(cached, grad, f"{type(self).__name__}.backward")
        return cached

    # ------------------------------------------------------------------
    # Shape chaining
    # ------------------------------------------------------------------
    @property
    def batch_size(self) -> Optional[int]:
        """
        Batch size this layer requires, or None if it accepts any.
        """
        return None

    @property
    def input_features(self) -> Optional[int]:
        """
        Feature width this layer requires, or None if it accepts any.
        """
        return None

    def output_features(self, in_features: Optional[int]) -> Optional[int]:
        """
        Shape-preserving default: output width equals input width.
        """
        return in_features

    @property
    def output_shape(self) -> Tuple[Optional[int], Optional[int]]:
        if self._cache is None:
            return (None, None)
        return tuple(int(d) for d in self._cache.shape)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Serialization hooks
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable constructor configuration.
        """
        return {}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Layer":
        """
        Rebuild a layer from `get_config` output.
        """
        return cls(**cfg)

    def __repr__(self) -> str:
        cfg = ", ".join(f"{k}={v!r}" for k, v in self.get_config().items())
        return f"{type(self).__name__}({cfg})"
