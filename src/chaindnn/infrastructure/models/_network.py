"""
Sequential network container.

This module defines `Network`, an ordered chain of layers. It owns:

- the layer sequence (insertion order is forward order)
- at most one shared optimizer factory, propagated to every layer
- the forward / backward / step orchestration of a training iteration
- Keras-like conveniences (`train_on_batch`, `fit`, `summary`, `predict`)
- JSON checkpointing (`save_json`, `load_json`) and in-memory
  `state_dict` / `load_state_dict`

One training iteration reads::

    out = net.forward(x)
    result = loss.forward(out, y)
    grad = loss.backward(out, y, result.cache)
    net.backward(grad)
    net.step()

Design notes
------------
- Layers are checked for shape compatibility as they are added: a layer that
  requires a specific input width (e.g. `Dense`) must match the width the
  chain produces so far, and all fixed batch sizes must agree.
- The optimizer factory is configuration-only and shared; each parameter owns
  its own optimizer state (created at registration time).
"""

from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

import numpy as np
from typing_extensions import Self

from ._history import History
from .._layer import Layer
from .._losses import Loss
from .._parameter import Parameter
from .._tensor import as_tensor
from ..module._serialization_core import layer_from_config, layer_to_config
from ..module._serialization_weights import (
    extract_state_payload,
    load_state_payload_,
)
from ..utils.weight_initializer import make_rng
from ...domain._errors import (
    EmptyNetworkError,
    MissingOptimizerError,
    ShapeMismatchError,
)
from ...domain._optimizers import IOptimizerFactory

CHECKPOINT_FORMAT = "chaindnn.json.ckpt.v1"

DEFAULT_FIT_BATCH_SIZE = 32


def _metric_name(metric: Callable[..., Any], i: int) -> str:
    return getattr(metric, "__name__", None) or f"metric_{i}"


class Network:
    """
    Ordered chain of layers trained with a shared optimizer factory.

    Parameters
    ----------
    *layers : Layer
        Initial layers, added in order via `add`.

    Examples
    --------
    >>> net = Network(Dense(4, 8, rng=0), Relu(), Dense(8, 3, rng=1), Softmax())
    >>> net.register_optimizer(Adam(lr=1e-2))
    """

    def __init__(self, *layers: Layer) -> None:
        self._layers: List[Layer] = []
        self._optimizer: Optional[IOptimizerFactory] = None
        for layer in layers:
            self.add(layer)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------
    def _chain_features(self) -> Optional[int]:
        feats: Optional[int] = None
        for layer in self._layers:
            feats = layer.output_features(feats)
        return feats

    @property
    def batch_size(self) -> Optional[int]:
        """
        Batch size fixed by any layer in the chain, or None.
        """
        for layer in self._layers:
            if layer.batch_size is not None:
                return layer.batch_size
        return None

    def add(self, layer: Layer) -> Self:
        """
        Append `layer` to the chain and return the network.

        Raises
        ------
        TypeError
            If `layer` is not a `Layer`.
        ShapeMismatchError
            If the layer's input width differs from the width the chain
            currently produces, or its fixed batch size differs from one
            already fixed by the chain.
        """
        if not isinstance(layer, Layer):
            raise TypeError(
                f"Network.add expects a Layer, got {type(layer).__name__}"
            )

        idx = len(self._layers)
        want = layer.input_features
        have = self._chain_features()
        if want is not None and have is not None and want != have:
            raise ShapeMismatchError(
                f"Network.add[{idx}]",
                expected=(have,),
                got=(want,),
                detail=f"{type(layer).__name__} input features do not chain "
                "with the previous layer's output",
            )

        fixed = self.batch_size
        if layer.batch_size is not None and fixed is not None and layer.batch_size != fixed:
            raise ShapeMismatchError(
                f"Network.add[{idx}]",
                expected=(fixed,),
                got=(layer.batch_size,),
                detail="batch size differs from the one fixed earlier in the chain",
            )

        self._layers.append(layer)
        if self._optimizer is not None:
            layer.register_optimizer(self._optimizer)
        return self

    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __getitem__(self, idx: int) -> Layer:
        return self._layers[idx]

    # ------------------------------------------------------------------
    # Parameters / optimizer
    # ------------------------------------------------------------------
    def parameters(self) -> List[Parameter]:
        return [p for layer in self._layers for p in layer.parameters()]

    def named_parameters(self) -> Iterator[Tuple[str, Parameter]]:
        """
        Yield ``("<layer index>.<parameter name>", parameter)`` pairs.
        """
        for i, layer in enumerate(self._layers):
            yield from layer.named_parameters(str(i))

    @property
    def optimizer(self) -> Optional[IOptimizerFactory]:
        return self._optimizer

    def register_optimizer(self, factory: IOptimizerFactory) -> None:
        """
        Share `factory` with every layer, creating per-parameter state.

        Layers added later are registered automatically. Parameters that
        already hold optimizer state keep it.
        """
        self._optimizer = factory
        for layer in self._layers:
            layer.register_optimizer(factory)

    def zero_grad(self) -> None:
        for layer in self._layers:
            layer.zero_grad()

    # ------------------------------------------------------------------
    # Forward / backward / step
    # ------------------------------------------------------------------
    def forward(self, x: Any) -> np.ndarray:
        """
        Run `x` through layers 0..N-1.

        Raises
        ------
        EmptyNetworkError
            If the network has no layers.
        """
        if not self._layers:
            raise EmptyNetworkError("forward")
        out = x
        for layer in self._layers:
            out = layer.forward(out)
        return out

    def __call__(self, x: Any) -> np.ndarray:
        return self.forward(x)

    def predict(self, x: Any) -> np.ndarray:
        """
        Inference-style forward pass.
        """
        return self.forward(x)

    def backward(self, grad: Any) -> np.ndarray:
        """
        Propagate the loss gradient through layers N-1..0.

        Returns
        -------
        np.ndarray
            Gradient with respect to the network input.

        Raises
        ------
        EmptyNetworkError
            If the network has no layers.
        MissingOptimizerError
            If any parameter has no optimizer state, whether it was meant to
            come from `register_optimizer` on the network or on its layer.
        """
        if not self._layers:
            raise EmptyNetworkError("backward")
        if any(p.state is None for p in self.parameters()):
            raise MissingOptimizerError("Network")

        g = grad
        for layer in reversed(self._layers):
            g = layer.backward(g)
        return g

    def step(self) -> None:
        """
        Apply every layer's parameter updates.

        Raises
        ------
        EmptyNetworkError
            If the network has no layers.
        """
        if not self._layers:
            raise EmptyNetworkError("step")
        for layer in self._layers:
            layer.step()

    # ------------------------------------------------------------------
    # Training helpers
    # ------------------------------------------------------------------
    def train_on_batch(
        self,
        x_batch: Any,
        y_batch: Any,
        *,
        loss: Loss,
        metrics: Optional[Sequence[Callable[..., Any]]] = None,
        metric_names: Optional[Sequence[str]] = None,
    ) -> Dict[str, float]:
        """
        Run one forward / backward / step iteration on a mini-batch.

        Parameters
        ----------
        x_batch, y_batch : array-like
            One mini-batch of inputs and labels.
        loss : Loss
            Terminal loss. Its cache from `forward` is handed to `backward`.
        metrics : Optional[Sequence[Callable]], optional
            Callables ``metric(predictions, labels) -> float`` evaluated on the
            pre-update predictions (e.g. ``CrossEntropyLoss().accuracy``).
        metric_names : Optional[Sequence[str]], optional
            Names for `metrics`. Defaults to each callable's ``__name__``.

        Returns
        -------
        Dict[str, float]
            ``{"loss": ..., <metric>: ...}``.

        Raises
        ------
        ValueError
            If `metric_names` and `metrics` differ in length.
        """
        if metrics and metric_names is not None and len(metric_names) != len(metrics):
            raise ValueError("metric_names must have the same length as metrics")

        y_batch = as_tensor(y_batch)
        out = self.forward(x_batch)
        result = loss.forward(out, y_batch)
        grad = loss.backward(out, y_batch, result.cache)
        self.backward(grad)
        self.step()

        logs: Dict[str, float] = {"loss": float(result.value)}
        for i, m in enumerate(metrics or ()):
            name = metric_names[i] if metric_names is not None else _metric_name(m, i)
            logs[str(name)] = float(m(out, y_batch))
        return logs

    def fit(
        self,
        x: Any,
        y: Any,
        *,
        loss: Loss,
        epochs: int = 1,
        batch_size: Optional[int] = None,
        shuffle: bool = True,
        metrics: Optional[Sequence[Callable[..., Any]]] = None,
        metric_names: Optional[Sequence[str]] = None,
        verbose: int = 1,
        rng: Any = None,
    ) -> History:
        """
        Train for a fixed number of epochs over ``(x, y)``.

        Parameters
        ----------
        x, y : array-like
            Inputs ``(n, in_features)`` and labels ``(n, out_features)``.
        loss : Loss
            Terminal loss.
        epochs : int, optional
            Number of passes over the data. Default is 1.
        batch_size : Optional[int], optional
            Mini-batch size. Defaults to the batch size fixed by the network,
            or 32 if none is fixed.
        shuffle : bool, optional
            Shuffle sample order every epoch. Default is True.
        metrics, metric_names : optional
            See `train_on_batch`.
        verbose : int, optional
            If non-zero, print one summary line per epoch. Default is 1.
        rng : None | int | numpy.random.Generator, optional
            Source of randomness for shuffling.

        Returns
        -------
        History
            Per-epoch averages of the loss and metrics, weighted by batch size.

        Raises
        ------
        ValueError
            If `epochs` or `batch_size` is not positive, or the network fixes a
            batch size larger than the dataset.
        ShapeMismatchError
            If `x` and `y` have different lengths, or `batch_size` conflicts
            with the batch size fixed by the network.

        Notes
        -----
        When the network fixes its batch size, a trailing partial batch cannot
        be fed; it is dropped with a warning.
        """
        if epochs < 1:
            raise ValueError("epochs must be >= 1")

        x = as_tensor(x)
        y = as_tensor(y)
        n = int(x.shape[0])
        if int(y.shape[0]) != n:
            raise ShapeMismatchError(
                "Network.fit",
                expected=(n,),
                got=(int(y.shape[0]),),
                detail="x and y must contain the same number of samples",
            )

        fixed = self.batch_size
        if batch_size is None:
            batch_size = fixed if fixed is not None else min(DEFAULT_FIT_BATCH_SIZE, n)
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if fixed is not None and batch_size != fixed:
            raise ShapeMismatchError(
                "Network.fit",
                expected=(fixed,),
                got=(batch_size,),
                detail="batch_size differs from the batch size fixed by the network",
            )

        stop = n
        if fixed is not None:
            stop = (n // batch_size) * batch_size
            if stop == 0:
                raise ValueError(
                    f"dataset of {n} samples is smaller than the fixed batch size {fixed}"
                )
            if stop != n:
                warnings.warn(
                    f"Network.fit: dropping the last {n - stop} sample(s) each epoch "
                    f"because the network requires batches of exactly {fixed}.",
                    RuntimeWarning,
                    stacklevel=2,
                )

        gen = make_rng(rng)
        hist = History()

        for epoch_idx in range(epochs):
            order = gen.permutation(n) if shuffle else np.arange(n)
            sums: Dict[str, float] = {}
            seen = 0

            for start in range(0, stop, batch_size):
                ids = order[start : start + batch_size]
                logs = self.train_on_batch(
                    x[ids],
                    y[ids],
                    loss=loss,
                    metrics=metrics,
                    metric_names=metric_names,
                )
                bs = len(ids)
                seen += bs
                for k, v in logs.items():
                    sums[k] = sums.get(k, 0.0) + float(v) * bs

            epoch_logs = {k: s / max(seen, 1) for k, s in sums.items()}
            hist.append_epoch(epoch_idx, epoch_logs)

            if verbose:
                parts = [f"Epoch {epoch_idx + 1}/{epochs}"]
                for k, v in epoch_logs.items():
                    parts.append(f"{k}: {v:.6f}")
                parts.append(f"seen: {seen}")
                print(" - ".join(parts))

        return hist

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    def summary(self) -> str:
        """
        Describe the chain: each layer, its output shape and parameter count.
        """
        rows = [("#", "Layer", "Output shape", "Params")]
        batch = self.batch_size
        feats: Optional[int] = None
        total = 0
        for i, layer in enumerate(self._layers):
            feats = layer.output_features(feats)
            count = sum(p.size for p in layer.parameters())
            total += count
            rows.append((str(i), repr(layer), str((batch, feats)), str(count)))

        widths = [max(len(r[c]) for r in rows) for c in range(4)]
        lines = [f"Network ({len(self._layers)} layers)"]
        for r in rows:
            lines.append("  ".join(cell.ljust(w) for cell, w in zip(r, widths)).rstrip())
        lines.append(f"Total params: {total}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        inner = ", ".join(repr(layer) for layer in self._layers)
        return f"Network({inner})"

    # ------------------------------------------------------------------
    # State / checkpointing
    # ------------------------------------------------------------------
    def state_dict(self) -> Dict[str, np.ndarray]:
        """
        Copy every parameter into ``{"<idx>.<name>": ndarray}``.
        """
        return {name: p.data.copy() for name, p in self.named_parameters()}

    def load_state_dict(self, state: Mapping[str, Any]) -> None:
        """
        Overwrite parameter values in-place from `state`.

        Raises
        ------
        KeyError
            If a parameter of this network is missing from `state`.
        ShapeMismatchError
            If a stored array does not match its parameter.
        """
        for name, p in self.named_parameters():
            if name not in state:
                raise KeyError(f"Missing parameter in state: '{name}'")
            p.copy_from(np.asarray(state[name], dtype=p.dtype))

    def save_json(self, path: str | Path) -> None:
        """
        Save architecture and weights into a single JSON file.

        Format
        ------
        {
          "format": "chaindnn.json.ckpt.v1",
          "arch": [{"kind": "dense", "config": {...}}, ...],
          "state": {
            "0.weight": {"b64": "...", "dtype": "<f4", "shape": [...], "order": "C"},
            ...
          }
        }

        Optimizer state is not saved.
        """
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            "format": CHECKPOINT_FORMAT,
            "arch": [layer_to_config(layer) for layer in self._layers],
            "state": extract_state_payload(self),
        }
        p.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

    @classmethod
    def load_json(cls, path: str | Path) -> "Network":
        """
        Rebuild a network from a checkpoint written by `save_json`.

        No optimizer is registered on the returned network.

        Raises
        ------
        ValueError
            If the checkpoint format is unsupported or names an unknown layer.
        """
        payload = json.loads(Path(path).read_text(encoding="utf-8"))

        fmt = payload.get("format")
        if fmt != CHECKPOINT_FORMAT:
            raise ValueError(f"Unsupported checkpoint format: {fmt!r}")

        net = cls(*(layer_from_config(node) for node in payload["arch"]))
        load_state_payload_(net, payload["state"])
        return net
