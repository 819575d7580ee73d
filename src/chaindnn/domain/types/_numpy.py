"""
Domain-level structural typing for NumPy-like n-dimensional arrays.

ChainDNN treats the dense linear-algebra primitive as an external, trusted
library: tensors *are* NumPy ``ndarray`` objects. This module defines
:class:`NDArrayLike`, a Protocol describing the subset of the ndarray API the
domain contracts rely on, so that domain interfaces can be typed without the
domain layer importing NumPy.

Typical implementers include:
- ``numpy.ndarray``
- Array views returned by slicing or transposition

This protocol is intended for typing and documentation purposes only.
"""

from __future__ import annotations

from typing import Any, Protocol, Tuple, runtime_checkable


@runtime_checkable
class NDArrayLike(Protocol):
    """
    Structural interface for objects that behave like NumPy ndarrays.

    Notes
    -----
    - Shapes are fixed-length tuples of positive integers.
    - All tensors flowing through a single network share one floating dtype.
    - The batch dimension is always axis 0 for activation tensors.
    """

    @property
    def shape(self) -> Tuple[int, ...]:
        """
        Shape of the array as a tuple of dimension sizes.
        """
        ...

    @property
    def ndim(self) -> int:
        """
        Number of dimensions (rank) of the array.
        """
        ...

    @property
    def dtype(self) -> Any:
        """
        Element data type of the array.
        """
        ...

    @property
    def T(self) -> NDArrayLike:
        """
        Transposed view of the array.
        """
        ...

    def sum(self, axis: int | None = None, keepdims: bool = False) -> Any:
        """
        Sum of array elements over the given axis.
        """
        ...

    def argmax(self, axis: int | None = None) -> Any:
        """
        Indices of the maximum values along the given axis.
        """
        ...

    def copy(self) -> NDArrayLike:
        """
        Return a copy of the array.
        """
        ...
