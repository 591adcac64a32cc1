"""
Flatten layer.

`Flatten` reshapes an ``(N, ...)`` batch into an ``(N, features)`` matrix and
restores the cached input shape on the way back. It owns no parameters.
"""

from __future__ import annotations

from typing import Optional

from ...domain._errors import ShapeMismatchError
from ...domain.model._stateless_mixin import StatelessConfigMixin
from .._layer import Layer
from ..module._serialization_core import register_layer
from ..tensor._shape import Shape, ShapeLike, as_shape
from ..tensor._tensor import Tensor


@register_layer()
class Flatten(StatelessConfigMixin, Layer):
    """
    Collapse channels, rows and cols of every sample into one row.
    """

    def __init__(self) -> None:
        super().__init__()
        self._input_shape: Optional[Shape] = None

    def compile_layer(self, input_shape: ShapeLike) -> Shape:
        shape = as_shape(input_shape)
        self._output_shape = Shape((1, shape.channels * shape.rows * shape.cols))
        return self._output_shape.clone()

    def forward(self, x: Tensor) -> Tensor:
        batches = x.shape.batches
        self._input_shape = x.shape.clone()
        return x.copy().reshape((batches, x.size // batches))

    def backward(self, gradient: Tensor) -> Tensor:
        input_shape = self._require_forward(self._input_shape)
        if gradient.size != input_shape.total_size:
            raise ShapeMismatchError("Flatten gradient", input_shape, gradient.shape)
        return gradient.copy().reshape(input_shape)
