"""
Layer registry and architecture (de)serialization.

The set of layer variants is closed (`LayerKind`). Each concrete layer class
registers itself against its tag with `@register_layer()`, and every piece of
code that needs to go from a tag back to a class (checkpoint loading) goes
through this registry instead of probing class names.

Node format
-----------
    {"kind": "dense", "config": {...}}
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Type

from ...domain._layer import LayerKind

_LAYER_REGISTRY: Dict[LayerKind, Type[Any]] = {}


def register_layer() -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator registering a layer class under its `kind` tag.

    Raises
    ------
    TypeError
        If the class does not declare a `LayerKind` tag.
    ValueError
        If another class is already registered for the same tag.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        kind = getattr(cls, "kind", None)
        if not isinstance(kind, LayerKind):
            raise TypeError(f"{cls.__name__} must declare `kind: LayerKind`.")
        existing = _LAYER_REGISTRY.get(kind)
        if existing is not None and existing is not cls:
            raise ValueError(
                f"Layer kind {kind.value!r} already registered by {existing.__name__}."
            )
        _LAYER_REGISTRY[kind] = cls
        return cls

    return deco


def layer_class(kind: Any) -> Type[Any]:
    """
    Resolve a layer class from a `LayerKind` (or its string value).

    Raises
    ------
    ValueError
        If the tag is unknown or no class is registered for it.
    """
    try:
        tag = LayerKind(kind)
    except ValueError as e:
        raise ValueError(f"Unknown layer kind {kind!r}.") from e
    if tag not in _LAYER_REGISTRY:
        raise ValueError(
            f"No layer registered for kind {tag.value!r}. "
            "Register it via @register_layer()."
        )
    return _LAYER_REGISTRY[tag]


def layer_to_config(layer: Any) -> Dict[str, Any]:
    """
    Convert a layer into its JSON-serializable architecture node.
    """
    return {"kind": layer.kind.value, "config": layer.get_config()}


def layer_from_config(node: Dict[str, Any]) -> Any:
    """
    Rebuild a layer (with freshly initialized parameters) from a node.
    """
    cls = layer_class(node["kind"])
    cfg = node.get("config", {}) or {}
    return cls.from_config(cfg)
