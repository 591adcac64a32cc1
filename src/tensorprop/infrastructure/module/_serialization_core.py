"""
Layer registry and persisted-layer conversion.

Layers register themselves with `register_layer` so persisted models can be
rebuilt from their type tag. A persisted layer node has the form:

    {
      "type": "Dense",
      "params": {...},          # layer.get_config()
      "weights": [...] | null,  # flat values
      "biases": [...] | null
    }
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type

from ...domain._errors import ConfigurationError

_LAYER_REGISTRY: dict[str, Type[Any]] = {}


def register_layer(name: Optional[str] = None) -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator to register a layer class for JSON deserialization.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        key = name or cls.__name__
        _LAYER_REGISTRY[key] = cls
        cls.layer_type = key
        return cls

    return deco


def registered_layers() -> Tuple[str, ...]:
    return tuple(sorted(_LAYER_REGISTRY))


def layer_to_config(layer: Any) -> dict[str, Any]:
    """
    Convert a layer into a JSON-serializable node.
    """
    weights = layer.weights
    biases = layer.biases
    return {
        "type": layer.layer_type,
        "params": layer.get_config(),
        "weights": None if weights is None else weights.data_copy(),
        "biases": None if biases is None else biases.data_copy(),
    }


def layer_from_config(node: dict[str, Any]) -> Any:
    """
    Rebuild a layer from a persisted node.

    Raises
    ------
    ConfigurationError
        If the node is malformed or its type is not registered.
    """
    if not isinstance(node, dict) or "type" not in node:
        raise ConfigurationError(f"Persisted layer must be an object with a 'type': {node!r}")
    type_name = str(node["type"])
    if type_name not in _LAYER_REGISTRY:
        raise ConfigurationError(
            f"Unknown layer type '{type_name}'. Register it via @register_layer."
        )

    params = node.get("params", {}) or {}
    if not isinstance(params, dict):
        raise ConfigurationError(f"'params' of {type_name} must be an object.")
    weights = _float_list(node.get("weights"), f"{type_name}.weights")
    biases = _float_list(node.get("biases"), f"{type_name}.biases")

    return _LAYER_REGISTRY[type_name].from_config(params, weights, biases)


def _float_list(value: Any, what: str) -> Optional[List[float]]:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigurationError(f"{what} must be a list of numbers.")
    try:
        return [float(v) for v in value]
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{what} must be a list of numbers.") from e


# ----------------------------------------------------------------------
# typed access to persisted params
# ----------------------------------------------------------------------
def config_value(params: Dict[str, Any], key: str, owner: str) -> Any:
    if key not in params:
        raise ConfigurationError(f"{owner} config is missing '{key}'.")
    return params[key]


def config_int(params: Dict[str, Any], key: str, owner: str) -> int:
    value = config_value(params, key, owner)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ConfigurationError(f"{owner} config '{key}' must be an integer, got {value!r}.")
    return int(value)


def config_ints(
    params: Dict[str, Any], key: str, owner: str, length: Optional[int] = None
) -> List[int]:
    value = config_value(params, key, owner)
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"{owner} config '{key}' must be a list, got {value!r}.")
    if length is not None and len(value) != length:
        raise ConfigurationError(
            f"{owner} config '{key}' must have {length} entries, got {len(value)}."
        )
    return [config_int({key: v}, key, owner) for v in value]


def config_str(params: Dict[str, Any], key: str, owner: str) -> str:
    value = config_value(params, key, owner)
    if not isinstance(value, str):
        raise ConfigurationError(f"{owner} config '{key}' must be a string, got {value!r}.")
    return value


def parameter_tensor_data(
    values: Optional[Sequence[float]], expected: int, what: str
) -> Sequence[float]:
    """
    Validate a persisted parameter list against the expected element count.
    """
    if values is None:
        raise ConfigurationError(f"{what} missing from persisted layer.")
    if len(values) != expected:
        raise ConfigurationError(f"{what} must hold {expected} values, got {len(values)}.")
    return values
