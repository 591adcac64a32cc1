"""
2-D pooling layer.

`Pooling` reduces every channel of every sample over sliding windows with a
max, min or average reducer. It has no trainable parameters.

Padding
-------
In ``"full"`` mode the input is padded so every axis yields ``ceil(n/s)``
windows. Padded cells hold ``-inf`` (max), ``+inf`` (min) or ``0`` (avg), so
they never win a max/min window; the average divides by the full window area.

Backward
--------
- max/min: each window's upstream gradient is routed to the cell that won
  the window in the forward pass (first occurrence on ties);
- avg: each window's upstream gradient is spread evenly over its cells.
Overlapping windows accumulate. The result is stripped of the padding.
"""

from __future__ import annotations

import math
import warnings
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from ...domain._errors import ConfigurationError, ShapeMismatchError
from ...domain.model._stateless_mixin import StatelessConfigMixin
from .._layer import Layer
from ..convolution._padding import IntPair, PaddingMode, compute_padding, output_extent, to_pair
from ..module._serialization_core import config_ints, config_str, register_layer
from ..tensor._iterator import TensorIterator
from ..tensor._shape import Shape, ShapeLike, as_shape
from ..tensor._tensor import Tensor


class PoolingType(str, Enum):
    MAX = "max"
    MIN = "min"
    AVG = "avg"

    @classmethod
    def parse(cls, value: Union[str, "PoolingType"]) -> "PoolingType":
        if isinstance(value, PoolingType):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown pooling type {value!r}; expected 'max', 'min' or 'avg'."
            ) from e


_FILL = {
    PoolingType.MAX: -math.inf,
    PoolingType.MIN: math.inf,
    PoolingType.AVG: 0.0,
}

_REDUCE: Dict[PoolingType, Callable[[Tensor], float]] = {
    PoolingType.MAX: lambda region: region.max(),
    PoolingType.MIN: lambda region: region.min(),
    PoolingType.AVG: lambda region: region.avg(),
}


@register_layer()
class Pooling(StatelessConfigMixin, Layer):
    """
    Max / min / average pooling over 2-D windows.

    Parameters
    ----------
    pool_type : str, optional
        ``"max"`` (default), ``"min"`` or ``"avg"``.
    kernel_size : int | Sequence[int], optional
        Window size ``(rows, cols)``. Defaults to ``(2, 2)``.
    strides : int | Sequence[int], optional
        Window step. Defaults to the kernel size.
    mode : str, optional
        ``"valid"`` or ``"full"``.
    """

    def __init__(
        self,
        pool_type: Union[str, PoolingType] = PoolingType.MAX,
        kernel_size: IntPair = (2, 2),
        strides: Optional[IntPair] = None,
        mode: Union[str, PaddingMode] = PaddingMode.VALID,
    ) -> None:
        super().__init__()
        self.pool_type = PoolingType.parse(pool_type)
        self.kernel_size = to_pair(kernel_size, "kernel_size", default=(2, 2))
        self.strides = (
            self.kernel_size if strides is None
            else to_pair(strides, "strides", default=self.kernel_size)
        )
        self.mode = PaddingMode.parse(mode)
        self.padding: List[int] = [0, 0, 0, 0]

        self._padded_input: Optional[Tensor] = None
        self._input_shape: Optional[Shape] = None

    def compile_layer(self, input_shape: ShapeLike) -> Shape:
        shape = as_shape(input_shape)
        kh, kw = self.kernel_size
        sh, sw = self.strides
        self.padding = compute_padding(shape, self.kernel_size, self.strides, self.mode)
        top, right, bottom, left = self.padding

        rows = shape.rows + top + bottom
        cols = shape.cols + left + right
        if rows < kh or cols < kw:
            raise ShapeMismatchError("Pooling kernel", f"at most ({rows}, {cols})", self.kernel_size)
        if (rows - kh) % sh or (cols - kw) % sw:
            warnings.warn(
                f"Pooling windows {self.kernel_size} with strides {self.strides} do not "
                f"tile a {rows}x{cols} input; trailing cells are ignored.",
                RuntimeWarning,
                stacklevel=2,
            )
        self._output_shape = Shape(
            (
                shape.channels,
                output_extent(shape.rows, top, bottom, kh, sh),
                output_extent(shape.cols, left, right, kw, sw),
            )
        )
        return self._output_shape.clone()

    def _out_extent(self, padded: Tensor) -> tuple[int, int]:
        kh, kw = self.kernel_size
        sh, sw = self.strides
        rows, cols = padded.shape.rows, padded.shape.cols
        if rows < kh or cols < kw:
            raise ShapeMismatchError("Pooling input", f"at least {self.kernel_size}", padded.shape)
        return (rows - kh) // sh + 1, (cols - kw) // sw + 1

    def forward(self, x: Tensor) -> Tensor:
        kh, kw = self.kernel_size
        sh, sw = self.strides
        padded = x.pad(*self.padding, value=_FILL[self.pool_type])
        out_h, out_w = self._out_extent(padded)
        reduce = _REDUCE[self.pool_type]

        out = Tensor.zeros(padded.shape.with_matrix(out_h, out_w))
        for src, dst in zip(TensorIterator(padded, "matrix"), TensorIterator(out, "matrix")):
            for i in range(out_h):
                for j in range(out_w):
                    region, _ = src.region_slice(i * sh, j * sw, kh, kw)
                    dst.set_value_at(i * out_w + j, reduce(region))

        self._input_shape = x.shape.clone()
        self._padded_input = padded
        return out

    def backward(self, gradient: Tensor) -> Tensor:
        padded = self._require_forward(self._padded_input)
        kh, kw = self.kernel_size
        sh, sw = self.strides
        out_h, out_w = self._out_extent(padded)
        expected = padded.shape.with_matrix(out_h, out_w)
        if not gradient.shape.eq(expected):
            raise ShapeMismatchError("Pooling gradient", expected, gradient.shape)

        grad_in = Tensor.zeros(padded.shape.clone())
        for src, g_map, dst in zip(
            TensorIterator(padded, "matrix"),
            TensorIterator(gradient, "matrix"),
            TensorIterator(grad_in, "matrix"),
        ):
            for i in range(out_h):
                for j in range(out_w):
                    upstream = g_map.value_at(i * out_w + j)
                    region, indices = src.region_slice(i * sh, j * sw, kh, kw)
                    if self.pool_type is PoolingType.MAX:
                        dst.add_value_at(indices[region.max_index()], upstream)
                    elif self.pool_type is PoolingType.MIN:
                        dst.add_value_at(indices[region.min_index()], upstream)
                    else:
                        share = upstream / len(indices)
                        for index in indices:
                            dst.add_value_at(index, share)

        return grad_in.trim(*self.padding).reshape(self._input_shape)

    def get_config(self) -> Dict[str, Any]:
        return {
            "pool_type": self.pool_type.value,
            "kernel_size": list(self.kernel_size),
            "strides": list(self.strides),
            "mode": self.mode.value,
            "padding": list(self.padding),
        }

    @classmethod
    def from_config(
        cls,
        cfg: Dict[str, Any],
        weights: Optional[Sequence[float]] = None,
        biases: Optional[Sequence[float]] = None,
    ) -> "Pooling":
        owner = cls.__name__
        layer = cls(
            pool_type=config_str(cfg, "pool_type", owner),
            kernel_size=config_ints(cfg, "kernel_size", owner, 2),
            strides=config_ints(cfg, "strides", owner, 2),
            mode=config_str(cfg, "mode", owner),
        )
        if "padding" in cfg:
            padding = config_ints(cfg, "padding", owner, 4)
            if min(padding) < 0:
                raise ConfigurationError(f"{owner} padding must be non-negative, got {padding}.")
            layer.padding = padding
        return layer
