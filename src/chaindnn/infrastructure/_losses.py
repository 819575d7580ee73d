"""
Loss functions for ChainDNN.

This module implements the terminal computations of a training iteration.
Each loss turns a ``(batch, features)`` prediction tensor and an identically
shaped label tensor into a scalar, and produces the gradient handed to
`Network.backward`.

Currently implemented losses:
- CrossEntropyLoss : categorical cross-entropy on probabilities (pairs with Softmax)
- MeanSquaredError : squared error normalized by the number of output features
- HuberLoss        : quadratic near zero, linear beyond a threshold

Design notes
------------
- `forward` returns a `LossResult(value, cache)`. Whatever `backward` can
  reuse (the Huber region mask) travels in `cache`; loss objects keep no
  mutable state between calls.
- `CrossEntropyLoss.backward` returns ``predictions - labels``, which is the
  gradient with respect to the *logits* of a preceding softmax. It is only
  meaningful together with `Softmax(fused_with_cross_entropy=True)`, which
  applies the ``1 / batch`` scaling.
- Predictions and labels must be 2D with identical shapes; anything else
  raises `ShapeMismatchError`.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

import numpy as np

from ..domain._losses import ILoss, LossResult
from ._tensor import as_tensor, require_2d, require_same_shape


class Loss(ILoss):
    """
    Base class for losses.

    Subclasses implement `forward` and `backward`; `loss` and `__call__`
    return only the scalar value.
    """

    def _check(
        self, predictions: Any, labels: Any, op: str
    ) -> Tuple[np.ndarray, np.ndarray]:
        pred = as_tensor(predictions)
        lab = as_tensor(labels, pred.dtype)
        require_2d(pred, op)
        require_same_shape(pred, lab, op)
        return pred, lab

    def forward(self, predictions: Any, labels: Any) -> LossResult:
        raise NotImplementedError

    def backward(
        self, predictions: Any, labels: Any, cache: Optional[Any] = None
    ) -> np.ndarray:
        raise NotImplementedError

    def loss(self, predictions: Any, labels: Any) -> float:
        return self.forward(predictions, labels).value

    def __call__(self, predictions: Any, labels: Any) -> float:
        return self.loss(predictions, labels)

    @property
    def name(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"{self.name}()"


class CrossEntropyLoss(Loss):
    """
    Categorical cross-entropy on probability inputs.

    Computes::

        L = -sum(labels * log(predictions + epsilon)) / batch

    Parameters
    ----------
    epsilon : float, optional
        Stabilizer added inside the log to avoid ``log(0)``. Defaults to 1e-4.
    """

    def __init__(self, epsilon: float = 1e-4) -> None:
        if float(epsilon) < 0.0:
            raise ValueError(f"epsilon must be >= 0, got {epsilon}")
        self.epsilon = float(epsilon)

    def forward(self, predictions: Any, labels: Any) -> LossResult:
        pred, lab = self._check(predictions, labels, "CrossEntropyLoss.forward")
        batch = pred.shape[0]
        total = np.sum(lab * np.log(pred + self.epsilon))
        return LossResult(float(-total / batch))

    def backward(
        self, predictions: Any, labels: Any, cache: Optional[Any] = None
    ) -> np.ndarray:
        """
        Combined softmax + cross-entropy gradient ``predictions - labels``.
        """
        pred, lab = self._check(predictions, labels, "CrossEntropyLoss.backward")
        return pred - lab

    def accuracy(self, predictions: Any, labels: Any) -> float:
        """
        Fraction of rows whose predicted arg-max class equals the label's.
        """
        pred, lab = self._check(predictions, labels, "CrossEntropyLoss.accuracy")
        hits = np.argmax(pred, axis=1) == np.argmax(lab, axis=1)
        return float(np.mean(hits))

    def __repr__(self) -> str:
        return f"CrossEntropyLoss(epsilon={self.epsilon})"


class MeanSquaredError(Loss):
    """
    Squared error normalized by the number of output features.

    Computes::

        L = sum((predictions - labels) ** 2) / num_features

    The batch dimension is summed, not averaged.
    """

    def forward(self, predictions: Any, labels: Any) -> LossResult:
        pred, lab = self._check(predictions, labels, "MeanSquaredError.forward")
        num_features = pred.shape[1]
        return LossResult(float(np.sum((pred - lab) ** 2) / num_features))

    def backward(
        self, predictions: Any, labels: Any, cache: Optional[Any] = None
    ) -> np.ndarray:
        pred, lab = self._check(predictions, labels, "MeanSquaredError.backward")
        return pred - lab


class HuberLoss(Loss):
    """
    Huber loss.

    Per element, with ``e = predictions - labels``::

        0.5 * e**2                                  if |e| <= threshold
        threshold * |e| - 0.5 * threshold**2        otherwise

    The elementwise terms are summed and, with ``reduction="mean"``, divided
    by the batch size.

    Parameters
    ----------
    threshold : float, optional
        Boundary between the quadratic and linear regions. Must be positive.
        Defaults to 1.0.
    reduction : {"mean", "sum"}, optional
        ``"mean"`` divides the summed loss by the batch size, ``"sum"`` does
        not. Defaults to ``"mean"``. The gradient is unaffected.

    Notes
    -----
    The default ``"mean"`` reduction gives the batch-averaged loss. For the
    column predictions ``[2, 3, 4, 5]``, labels ``[2, 1, 3, 0]`` and
    ``threshold=1.5`` it is 2.1875. The summed value 8.75 is obtained with
    ``reduction="sum"``.

    `forward` returns the boolean mask ``|e| <= threshold`` as its cache.
    Passing it to `backward` avoids recomputing it; omitting it is allowed.
    """

    _REDUCTIONS = ("mean", "sum")

    def __init__(self, threshold: float = 1.0, reduction: str = "mean") -> None:
        if float(threshold) <= 0.0:
            raise ValueError(f"threshold must be > 0, got {threshold}")
        if reduction not in self._REDUCTIONS:
            raise ValueError(
                f"reduction must be one of {self._REDUCTIONS}, got {reduction!r}"
            )
        self.threshold = float(threshold)
        self.reduction = reduction

    def _mask(self, error: np.ndarray) -> np.ndarray:
        return np.abs(error) <= self.threshold

    def forward(self, predictions: Any, labels: Any) -> LossResult:
        pred, lab = self._check(predictions, labels, "HuberLoss.forward")
        error = pred - lab
        mask = self._mask(error)

        t = self.threshold
        quadratic = 0.5 * error**2
        linear = t * np.abs(error) - 0.5 * t * t
        total = float(np.sum(np.where(mask, quadratic, linear)))

        if self.reduction == "mean":
            total /= pred.shape[0]
        return LossResult(total, mask)

    def backward(
        self, predictions: Any, labels: Any, cache: Optional[Any] = None
    ) -> np.ndarray:
        """
        Return ``e`` in the quadratic region and ``threshold * sign(e)`` in the
        linear region, with ``e >= 0`` counted as positive.

        Raises
        ------
        ShapeMismatchError
            If a supplied `cache` does not match the prediction shape.
        """
        pred, lab = self._check(predictions, labels, "HuberLoss.backward")
        error = pred - lab

        if cache is None:
            mask = self._mask(error)
        else:
            mask = np.asarray(cache, dtype=bool)
            require_same_shape(pred, mask, "HuberLoss.backward")

        linear = np.where(error >= 0, self.threshold, -self.threshold)
        return np.where(mask, error, linear).astype(pred.dtype, copy=False)

    def __repr__(self) -> str:
        return f"HuberLoss(threshold={self.threshold}, reduction={self.reduction!r})"
