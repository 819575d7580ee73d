from __future__ import annotations

from typing import Any, Dict

import numpy as np

from ..encoding._b64 import ndarray_to_payload, payload_to_ndarray
from ...domain._errors import ShapeMismatchError


def extract_state_payload(model: Any) -> Dict[str, Dict[str, Any]]:
    """
    Extract parameters into JSON payloads keyed by qualified parameter name.

    Parameters
    ----------
    model:
        Any object exposing ``named_parameters()`` yielding ``(name, Parameter)``.

    Returns
    -------
    dict
        ``{"<idx>.<name>": payload}`` with payloads from `ndarray_to_payload`.
    """
    named_params = getattr(model, "named_parameters", None)
    if not callable(named_params):
        raise AttributeError("Model must implement named_parameters().")

    return {
        str(name): ndarray_to_payload(np.asarray(p.data))
        for name, p in named_params()
    }


def load_state_payload_(model: Any, payloads: Dict[str, Dict[str, Any]]) -> None:
    """
    In-place load of parameters from JSON payloads.

    Values are cast to each parameter's dtype and copied into the existing
    arrays, so references held by layers stay valid.

    Raises
    ------
    KeyError
        If a parameter key is missing in the payload mapping.
    ShapeMismatchError
        If a stored array does not match the parameter shape.
    """
    named_params = getattr(model, "named_parameters", None)
    if not callable(named_params):
        raise AttributeError("Model must implement named_parameters().")

    for name, p in named_params():
        key = str(name)
        if key not in payloads:
            raise KeyError(f"Missing parameter in checkpoint: '{key}'")

        arr = payload_to_ndarray(payloads[key])
        if tuple(arr.shape) != tuple(p.shape):
            raise ShapeMismatchError(
                f"load_state[{key}]", expected=p.shape, got=arr.shape
            )
        p.copy_from(arr.astype(p.dtype, copy=False))
