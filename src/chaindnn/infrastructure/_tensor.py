"""
NumPy tensor helpers.

ChainDNN does not implement its own tensor type: the dense linear-algebra
primitive is NumPy, and every activation, gradient and parameter is a plain
``np.ndarray``. This module collects the small conversion and validation
helpers shared by layers, losses and optimizers so that shape preconditions
are checked (and reported) uniformly.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np

from ..domain._errors import ShapeMismatchError

DEFAULT_DTYPE = np.float32


def as_tensor(x: Any, dtype: Optional[Any] = None) -> np.ndarray:
    """
    Convert an array-like to an ``np.ndarray`` of a floating dtype.

    Parameters
    ----------
    x : Any
        Array-like input (ndarray, nested lists, scalars).
    dtype : Optional[Any], optional
        Target dtype. If None, floating arrays keep their dtype and anything
        else is converted to `DEFAULT_DTYPE`.

    Returns
    -------
    np.ndarray
        The converted array. No copy is made when `x` already matches.
    """
    arr = np.asarray(x)
    if dtype is not None:
        return arr.astype(dtype, copy=False)
    if not np.issubdtype(arr.dtype, np.floating):
        return arr.astype(DEFAULT_DTYPE)
    return arr


def require_2d(x: np.ndarray, op: str) -> None:
    """
    Require a ``(batch, features)`` tensor.

    Raises
    ------
    ShapeMismatchError
        If `x` is not two-dimensional.
    """
    if x.ndim != 2:
        raise ShapeMismatchError(
            op, got=x.shape, detail="expected a 2D (batch, features) tensor"
        )


def require_same_shape(a: np.ndarray, b: np.ndarray, op: str) -> None:
    """
    Require two tensors to have identical shapes.

    Raises
    ------
    ShapeMismatchError
        If the shapes differ.
    """
    if tuple(a.shape) != tuple(b.shape):
        raise ShapeMismatchError(op, expected=a.shape, got=b.shape)


def require_shape(x: np.ndarray, expected: Sequence[int], op: str) -> None:
    """
    Require `x` to have exactly the shape `expected`.

    Raises
    ------
    ShapeMismatchError
        If the shapes differ.
    """
    if tuple(x.shape) != tuple(expected):
        raise ShapeMismatchError(op, expected=expected, got=x.shape)
