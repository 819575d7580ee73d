"""
Weight initializer registry and dispatch utilities.

This module defines the concrete `WeightInitializer` used by the
infrastructure layer to apply registered weight initialization strategies
(e.g. Glorot uniform/normal, constants) to NumPy arrays.

Design
------
- Initializers are registered by string name via a decorator-based registry.
- Each initializer is a callable ``fn(array, rng) -> array`` that fills
  `array` *in-place* from the explicit `numpy.random.Generator` and returns it.
- The dispatcher resolves an initializer by name at construction time and
  invokes it via `__call__`.

Usage example
-------------
Registering an initializer:

    @WeightInitializer.register_initializer("glorot_uniform")
    def glorot_uniform(array, rng): ...

Applying an initializer:

    init = WeightInitializer("glorot_uniform")
    init(weight_array, rng=make_rng(0))

Notes
-----
- Registration keys must be unique unless explicitly overwritten.
- Initializers compute fan-in / fan-out themselves from the array shape.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Optional, TypeVar, Union

import numpy as np

from ....domain._errors import UninitializedDistributionError
from ....domain.utils._weight_initialization import _WeightInitializer

T = TypeVar("T", bound=Callable[..., np.ndarray])

SeedLike = Union[None, int, np.random.Generator]


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """
    Normalize a seed-like value into a `numpy.random.Generator`.

    Parameters
    ----------
    seed : None | int | numpy.random.Generator
        - None: a freshly seeded generator (non-reproducible).
        - int: a generator seeded deterministically.
        - Generator: returned unchanged so callers can share a stream.

    Returns
    -------
    numpy.random.Generator
    """
    if isinstance(seed, np.random.Generator):
        return seed
    if seed is None or isinstance(seed, (int, np.integer)):
        return np.random.default_rng(seed)
    raise TypeError(
        f"rng must be None, an int seed, or a numpy Generator, got {type(seed).__name__}"
    )


class WeightInitializer(_WeightInitializer):
    """
    Registry-backed weight initializer dispatcher.

    Usage
    -----
    Register:
        @WeightInitializer.register_initializer("glorot_uniform")
        def glorot_uniform(array, rng): ...

    Dispatch:
        init = WeightInitializer("glorot_uniform")
        init(array, rng=rng)

    Raises
    ------
    UninitializedDistributionError
        If `initializer_name` is not registered.
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[..., np.ndarray]]] = {}

    def __init__(self, initializer_name: Any) -> None:
        # accept InitializationScheme members as well as plain strings
        name = getattr(initializer_name, "value", initializer_name)
        try:
            self._initializer: Callable[..., np.ndarray] = self.INITIALIZERS[name]
        except (KeyError, TypeError) as e:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise UninitializedDistributionError(
                str(name), f"unknown scheme. Available: {available}"
            ) from e
        self.name = str(name)

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Decorator to register a weight initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ValueError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    @classmethod
    def get(cls, name: str) -> Callable[..., np.ndarray]:
        """Get a registered initializer callable by name."""
        return cls.INITIALIZERS[name]

    def __call__(
        self, array: np.ndarray, rng: Optional[SeedLike] = None
    ) -> np.ndarray:
        return self._initializer(array, make_rng(rng))
