"""
Base64 array payloads for JSON checkpoints.

A parameter array is stored as its raw C-order bytes, base64-encoded, next to
the dtype string and shape needed to rebuild it::

    {"b64": "...", "dtype": "<f4", "shape": [4, 6], "order": "C"}
"""

from __future__ import annotations

import base64
from typing import Any, Dict, Mapping

import numpy as np

from ...domain._errors import ShapeMismatchError


def ndarray_to_payload(arr: np.ndarray) -> Dict[str, Any]:
    """
    Serialize an ndarray into a JSON-safe payload.
    """
    a = np.ascontiguousarray(arr)
    return {
        "b64": base64.b64encode(a.tobytes(order="C")).decode("ascii"),
        "dtype": a.dtype.str,
        "shape": [int(d) for d in a.shape],
        "order": "C",
    }


def payload_to_ndarray(payload: Mapping[str, Any]) -> np.ndarray:
    """
    Rebuild the array stored by `ndarray_to_payload`.

    Parameters
    ----------
    payload : Mapping[str, Any]
        Mapping with ``b64``, ``dtype`` and ``shape`` entries. ``order`` is
        optional and must be ``"C"`` when present.

    Returns
    -------
    np.ndarray
        A writeable array that owns its memory.

    Raises
    ------
    ValueError
        If ``order`` is not ``"C"``.
    ShapeMismatchError
        If the decoded byte count does not match ``dtype`` and ``shape``.
    """
    order = payload.get("order", "C")
    if order != "C":
        raise ValueError(f"unsupported array order {order!r}; expected 'C'")

    dtype = np.dtype(str(payload["dtype"]))
    shape = tuple(int(d) for d in payload["shape"])
    raw = base64.b64decode(str(payload["b64"]).encode("ascii"))

    count = int(np.prod(shape, dtype=np.int64))
    if len(raw) != count * dtype.itemsize:
        raise ShapeMismatchError(
            "payload_to_ndarray",
            expected=shape,
            detail=f"{len(raw)} bytes cannot hold {count} values of dtype {dtype.str}",
        )
    return np.frombuffer(raw, dtype=dtype).reshape(shape).copy()
