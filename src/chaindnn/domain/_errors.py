"""
Precondition errors for ChainDNN.

This module defines the exceptions raised when a layer, loss, optimizer or
network is used in a way that violates its contract. All of them are
programmer errors (misconfiguration or call-order mistakes) rather than
transient conditions, so nothing in the framework retries or recovers from
them: they stop the current training step and report the failing
precondition.

Every exception derives from `ChainDNNError`, which makes it possible to
catch any framework precondition failure with a single `except` clause, while
still subclassing the closest built-in category (`ValueError` for bad
values/shapes, `RuntimeError` for bad call order or missing state).
"""

from __future__ import annotations

from typing import Optional, Sequence


def _fmt_shape(shape: Optional[Sequence[int]]) -> str:
    if shape is None:
        return "None"
    return "(" + ", ".join(str(int(d)) for d in shape) + ")"


class ChainDNNError(Exception):
    """
    Base class for all ChainDNN precondition failures.
    """


class ShapeMismatchError(ChainDNNError, ValueError):
    """
    Raised when tensor dimensions required by an operation disagree.

    Typical causes are an input whose feature dimension does not match a
    layer's weights, an upstream gradient whose batch dimension differs from
    the cached forward input, or predictions and labels of different shapes.

    Attributes
    ----------
    op : str
        Name of the operation that detected the mismatch (e.g. "Dense.forward").
    expected : Optional[tuple[int, ...]]
        Shape (or partial shape) the operation required.
    got : Optional[tuple[int, ...]]
        Shape that was actually supplied.
    """

    def __init__(
        self,
        op: str,
        expected: Optional[Sequence[int]] = None,
        got: Optional[Sequence[int]] = None,
        detail: str = "",
    ) -> None:
        """
        Initialize the ShapeMismatchError.

        Parameters
        ----------
        op : str
            The operation that detected the mismatch.
        expected : Optional[Sequence[int]], optional
            Required shape, if it can be expressed as a single shape.
        got : Optional[Sequence[int]], optional
            Supplied shape.
        detail : str, optional
            Free-form explanation appended to the message.
        """
        msg = f"{op}: shape mismatch"
        if expected is not None or got is not None:
            msg += f" (expected {_fmt_shape(expected)}, got {_fmt_shape(got)})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
        self.op = op
        self.expected = tuple(expected) if expected is not None else None
        self.got = tuple(got) if got is not None else None


class EmptyNetworkError(ChainDNNError, RuntimeError):
    """
    Raised when a network operation is invoked on a network with no layers.

    Attributes
    ----------
    op : str
        The network operation that was attempted ("forward", "backward", ...).
    """

    def __init__(self, op: str) -> None:
        super().__init__(f"Network.{op} called on a network with no layers.")
        self.op = op


class MissingOptimizerError(ChainDNNError, RuntimeError):
    """
    Raised when an update requires optimizer state that was never registered.

    Attributes
    ----------
    owner : str
        Name of the layer or network that required the optimizer.
    parameter : Optional[str]
        Name of the parameter lacking optimizer state, when known.
    """

    def __init__(self, owner: str, parameter: Optional[str] = None) -> None:
        target = f"parameter '{parameter}' of {owner}" if parameter else owner
        super().__init__(
            f"No optimizer registered for {target}. "
            "Call register_optimizer(factory) before training."
        )
        self.owner = owner
        self.parameter = parameter


class UninitializedDistributionError(ChainDNNError, ValueError):
    """
    Raised when a weight-initialization scheme cannot produce a distribution.

    This covers unknown scheme names as well as fan-in/fan-out values that do
    not define a valid distribution (``fan_in + fan_out <= 0``).

    Attributes
    ----------
    scheme : str
        The requested initialization scheme.
    """

    def __init__(self, scheme: str, detail: str) -> None:
        super().__init__(f"Cannot draw weights with scheme {scheme!r}: {detail}")
        self.scheme = scheme


class ForwardNotCalledError(ChainDNNError, RuntimeError):
    """
    Raised when `backward` is invoked on a layer that has no cached input.

    Attributes
    ----------
    layer : str
        Name of the layer whose backward pass was requested.
    """

    def __init__(self, layer: str) -> None:
        super().__init__(
            f"{layer}.backward called before forward; no cached input available."
        )
        self.layer = layer


class MissingGradientError(ChainDNNError, RuntimeError):
    """
    Raised when `step` is invoked on a parameter that has no gradient.

    Attributes
    ----------
    parameter : str
        Name of the parameter lacking a gradient.
    """

    def __init__(self, parameter: str) -> None:
        super().__init__(
            f"Parameter '{parameter}' has no gradient; "
            "call backward before step."
        )
        self.parameter = parameter
