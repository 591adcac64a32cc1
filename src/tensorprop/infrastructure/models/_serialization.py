"""
JSON persistence for `Sequential` models.

File format
-----------
{
  "format": "tensorprop.json.v1",
  "layers": [
    {"type": "Dense", "params": {...}, "weights": [...], "biases": [...]},
    ...
  ],
  "history": {"history": {"loss": [...], "accuracy": [...]}, "epoch": [...]}
}

Weights and biases are stored as flat lists of floats in the tensor's
row-major order; layers rebuild their parameter shapes from ``params``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

from ...domain._errors import ConfigurationError
from ..module._serialization_core import layer_from_config, layer_to_config
from ._history import History

if TYPE_CHECKING:
    from ._sequential import Sequential

FORMAT = "tensorprop.json.v1"


def model_to_payload(model: "Sequential") -> Dict[str, Any]:
    return {
        "format": FORMAT,
        "layers": [layer_to_config(layer) for layer in model.layers],
        "history": model.history_object.to_dict(),
    }


def model_from_payload(payload: Dict[str, Any], cls: type) -> "Sequential":
    """
    Rebuild a model (uncompiled, weights restored) from a payload.

    Raises
    ------
    ConfigurationError
        If the format tag or any layer node is invalid.
    """
    if not isinstance(payload, dict):
        raise ConfigurationError("Model payload must be a JSON object.")
    fmt = payload.get("format")
    if fmt != FORMAT:
        raise ConfigurationError(f"Unsupported model format: {fmt!r}")
    nodes = payload.get("layers")
    if not isinstance(nodes, list):
        raise ConfigurationError("Model payload needs a 'layers' list.")

    model = cls(*[layer_from_config(node) for node in nodes])
    history = payload.get("history")
    if history is not None:
        if not isinstance(history, dict):
            raise ConfigurationError("Model 'history' must be an object.")
        try:
            model.history_object = History.from_dict(history)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Malformed model history: {e}") from e
    return model


def save_payload(payload: Dict[str, Any], path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_payload(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    try:
        return json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{p} is not valid JSON: {e}") from e
