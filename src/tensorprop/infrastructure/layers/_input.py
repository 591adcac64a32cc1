"""
Input layer.

`Input` fixes the per-sample shape a pipeline accepts. Its forward pass only
validates the channels, rows and cols of the incoming batch; the batch count
is free.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ...domain._errors import ConfigurationError, PreconditionError, ShapeMismatchError
from ...domain.model._stateless_mixin import StatelessConfigMixin
from .._layer import Layer
from ..module._serialization_core import config_ints, register_layer
from ..tensor._shape import Shape, ShapeLike, as_shape
from ..tensor._tensor import Tensor

_DIM_NAMES = ("channels", "rows", "cols")


@register_layer()
class Input(StatelessConfigMixin, Layer):
    """
    Shape-checking entry layer.

    Parameters
    ----------
    shape : Sequence[int] | Shape, optional
        Per-sample shape. When omitted, the shape passed to `compile_layer`
        is adopted.
    """

    def __init__(self, shape: Optional[ShapeLike] = None) -> None:
        super().__init__()
        self.shape: Optional[Shape] = None if shape is None else as_shape(shape)
        self._forwarded = False

    def _check(self, shape: Shape, op: str) -> None:
        expected = self.shape
        for name, want, got in zip(
            _DIM_NAMES,
            (expected.channels, expected.rows, expected.cols),
            (shape.channels, shape.rows, shape.cols),
        ):
            if want != got:
                raise ShapeMismatchError(f"{op} {name}", want, got)

    def compile_layer(self, input_shape: ShapeLike) -> Shape:
        shape = as_shape(input_shape)
        if self.shape is None:
            self.shape = shape.clone()
        else:
            self._check(shape, "Input")
        self._output_shape = self.shape.clone()
        return self.shape.clone()

    def forward(self, x: Tensor) -> Tensor:
        if self.shape is None:
            raise PreconditionError("Input used before compile_layer().")
        self._check(x.shape, "Input")
        self._forwarded = True
        return x

    def backward(self, gradient: Tensor) -> Tensor:
        if not self._forwarded:
            raise PreconditionError("Input.backward called before forward.")
        return gradient

    def get_config(self) -> Dict[str, Any]:
        return {"shape": None if self.shape is None else self.shape.as_tuple()}

    @classmethod
    def from_config(
        cls,
        cfg: Dict[str, Any],
        weights: Optional[Sequence[float]] = None,
        biases: Optional[Sequence[float]] = None,
    ) -> "Input":
        if cfg.get("shape") is None:
            return cls()
        dims = config_ints(cfg, "shape", cls.__name__)
        if not dims:
            raise ConfigurationError("Input config 'shape' must not be empty.")
        return cls(dims)
