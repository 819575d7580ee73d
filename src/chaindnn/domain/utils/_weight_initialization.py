"""
Abstract interfaces and utilities for weight initialization.

This module defines the abstract base class for weight initializer
dispatchers, the enumeration of supported initialization schemes, and shared
helpers for computing fan-in and fan-out values from parameter shapes.

The concrete implementation and registry logic live in the infrastructure
layer. This module exists in the domain layer to define contracts and shared
mathematical utilities without binding to any specific backend.
"""

from __future__ import annotations

from abc import ABC
from enum import Enum
from typing import Any, Callable, Dict, TypeVar

from ..types._numpy import NDArrayLike


T = TypeVar("T", bound=Callable[..., NDArrayLike])


class InitializationScheme(str, Enum):
    """
    Weight-initialization schemes understood by `Dense`.

    Values are the registry keys of the corresponding initializers.
    """

    GLOROT_UNIFORM = "glorot_uniform"
    GLOROT_NORMAL = "glorot_normal"


class _WeightInitializer(ABC):
    """
    Abstract base class for weight initializer dispatchers.

    Design notes
    ------------
    - Initializers are identified by string names.
    - Each initializer is a callable that fills an array in-place from an
      explicit random generator and returns it.
    - This class does not prescribe how initializers are stored or invoked;
      it only defines the expected interface.
    """

    INITIALIZERS: Dict[str, Callable] = {}

    def __init__(self, initializer_name: str) -> None:
        """
        Construct a weight initializer dispatcher.

        Parameters
        ----------
        initializer_name:
            The string key identifying a registered initializer.
        """
        ...

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Register a weight initializer under a given name.

        Parameters
        ----------
        name:
            Name used to identify the initializer.
        overwrite:
            Whether to allow overwriting an existing registration.

        Returns
        -------
        Callable
            A decorator that registers the initializer function.
        """
        ...

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """
        Return the names of all registered initializers (sorted).
        """
        ...

    @classmethod
    def get(cls, name: str) -> Callable[..., NDArrayLike]:
        """
        Get a registered initializer callable by name.
        """
        ...

    def __call__(self, array: NDArrayLike, *args: Any, **kwargs: Any) -> NDArrayLike:
        """
        Apply the initializer to an array.

        Parameters
        ----------
        array:
            The array to be filled in-place.
        *args, **kwargs:
            Optional arguments forwarded to the initializer (e.g. `rng`).
        """
        ...


def _calculate_fan_in_and_fan_out(shape: tuple[int, ...]) -> tuple[int, int]:
    """
    Compute fan-in and fan-out for a parameter shape.

    ChainDNN stores dense weights as ``(in_features, out_features)`` so that
    the forward pass is ``x @ W``. Fan-in is therefore the leading dimension
    and fan-out the trailing one.

    Parameters
    ----------
    shape:
        Shape of the parameter.

    Returns
    -------
    tuple[int, int]
        A tuple of (fan_in, fan_out).
    """
    if len(shape) == 0:
        return 1, 1  # scalar
    if len(shape) == 1:
        # bias-like vector
        return int(shape[0]), int(shape[0])
    if len(shape) == 2:
        fan_in, fan_out = shape
        return int(fan_in), int(fan_out)

    # Higher rank: leading axes feed the trailing one.
    fan_in = 1
    for d in shape[:-1]:
        fan_in *= int(d)
    return fan_in, int(shape[-1])
