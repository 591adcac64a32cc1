"""
Conv2D layer implementation for tensorprop.

This module defines the trainable 2-D convolution layer (`Conv2D`). It owns
the filter bank and per-filter biases and expresses both passes with the
`Tensor` correlation primitives.

Layout
------
- Inputs are ``(N, C, H, W)`` (a 3-D ``(C, H, W)`` tensor is one sample).
- Weights are ``(F, C, kh, kw)``; biases are ``(1, F)``.
- Outputs are ``(N, F, out_h, out_w)`` before the activation.

Backward pass
-------------
Let ``G`` be the gradient w.r.t. the pre-activation output, dilated by
``stride - 1`` zeros so it lives on the stride-1 grid:

- bias gradient: the sum of ``G`` per filter;
- weights gradient: the padded input (cropped to the extent the windows
  cover) cross-correlated with ``G``;
- input gradient: ``G`` padded by ``(kh - 1, kw - 1)`` and convolved with each
  filter, embedded in the padded-input extent, then stripped of the padding.

Example
-------
>>> conv = Conv2D(8, kernel_size=(3, 3), mode="full", activation="relu")
>>> conv.compile_layer((1, 28, 28))
Shape((8, 28, 28))
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

from ...domain._activation import IActivation
from ...domain._errors import ConfigurationError, DomainError, ShapeMismatchError
from .._activations import resolve_activation
from .._layer import Layer
from ..module._serialization_core import (
    config_int,
    config_ints,
    config_str,
    parameter_tensor_data,
    register_layer,
)
from ..tensor._iterator import TensorIterator
from ..tensor._shape import Shape, ShapeLike, as_shape
from ..tensor._tensor import Tensor
from ..utils.weight_initializer import WeightInitializer
from ._padding import IntPair, PaddingMode, compute_padding, output_extent, to_pair


@register_layer()
class Conv2D(Layer):
    """
    2-D convolution layer.

    Parameters
    ----------
    filters : int
        Number of output channels. Must be positive.
    kernel_size : int | Sequence[int], optional
        Window size ``(rows, cols)``. Defaults to ``(1, 1)``.
    strides : int | Sequence[int], optional
        Window step ``(rows, cols)``. Defaults to ``(1, 1)``.
    mode : str, optional
        ``"valid"`` (no padding) or ``"full"`` (output extent ``ceil(n/s)``).
    activation : str | IActivation, optional
        Output activation. Defaults to ``"relu"``.
    """

    def __init__(
        self,
        filters: int,
        kernel_size: IntPair = (1, 1),
        strides: IntPair = (1, 1),
        mode: Union[str, PaddingMode] = PaddingMode.VALID,
        activation: Union[str, IActivation, None] = "relu",
    ) -> None:
        super().__init__()
        if int(filters) < 1:
            raise DomainError(f"Conv2D filters must be positive, got {filters}.")
        self.filters = int(filters)
        self.kernel_size = to_pair(kernel_size, "kernel_size")
        self.strides = to_pair(strides, "strides")
        self.mode = PaddingMode.parse(mode)
        self.activation = resolve_activation(activation)
        self.padding: List[int] = [0, 0, 0, 0]

        self._padded_input: Optional[Tensor] = None
        self._input_shape: Optional[Shape] = None

    def compile_layer(self, input_shape: ShapeLike) -> Shape:
        """
        Compute padding, allocate the filter bank and infer the output shape.

        Raises
        ------
        ShapeMismatchError
            If the kernel does not fit in the (padded) input.
        """
        shape = as_shape(input_shape)
        channels, rows, cols = shape.channels, shape.rows, shape.cols
        kh, kw = self.kernel_size
        sh, sw = self.strides

        self.padding = compute_padding(shape, self.kernel_size, self.strides, self.mode)
        top, right, bottom, left = self.padding
        if rows + top + bottom < kh or cols + left + right < kw:
            raise ShapeMismatchError(
                "Conv2D kernel", f"at most ({rows + top + bottom}, {cols + left + right})",
                self.kernel_size,
            )
        out_h = output_extent(rows, top, bottom, kh, sh)
        out_w = output_extent(cols, left, right, kw, sw)

        self._weights = Tensor.zeros((self.filters, channels, kh, kw))
        WeightInitializer.for_activation(self.activation.rectifying)(self._weights)
        self._biases = Tensor.zeros((1, self.filters))
        self._weights_gradient = None
        self._biases_gradient = None

        self._output_shape = Shape((self.filters, out_h, out_w))
        return self._output_shape.clone()

    def forward(self, x: Tensor) -> Tensor:
        """
        Cross-correlate every sample with every filter, add the bias, activate.
        """
        weights = self._require_parameters()
        if x.shape.channels != weights.shape.channels:
            raise ShapeMismatchError("Conv2D input channels", weights.shape.channels, x.shape.channels)
        kh, kw = self.kernel_size
        sh, sw = self.strides

        padded = x.pad(*self.padding)
        rows, cols = padded.shape.rows, padded.shape.cols
        if rows < kh or cols < kw:
            raise ShapeMismatchError("Conv2D input", f"at least {self.kernel_size}", x.shape)
        out_h = (rows - kh) // sh + 1
        out_w = (cols - kw) // sw + 1

        out = Tensor.zeros((padded.shape.batches, self.filters, out_h, out_w))
        out_maps = TensorIterator(out, "matrix")
        for sample in TensorIterator(padded, "batches"):
            for f, kernel in enumerate(TensorIterator(weights, "batches")):
                target = next(out_maps)
                sample.cross_correlate(kernel, self.strides, out=target)
                target.scalar_add(self._biases.value_at(f), in_place=True)

        self._input_shape = x.shape.clone()
        self._padded_input = padded
        return self.activation.forward(out)

    def backward(self, gradient: Tensor) -> Tensor:
        padded = self._require_forward(self._padded_input)
        grad = self.activation.backward(gradient)
        batches = padded.shape.batches
        if grad.shape.channels != self.filters or grad.shape.batches != batches:
            raise ShapeMismatchError(
                "Conv2D gradient", f"({batches}, {self.filters}, *, *)", grad.shape
            )

        kh, kw = self.kernel_size
        sh, sw = self.strides
        used_h = (grad.shape.rows - 1) * sh + kh
        used_w = (grad.shape.cols - 1) * sw + kw
        dilated = grad.dilate(sh - 1, sw - 1)

        self._biases_gradient = self._bias_gradient(grad)
        self._weights_gradient = self._weight_gradient(padded, dilated, used_h, used_w)
        return self._input_gradient(padded.shape, dilated, used_h, used_w)

    def _bias_gradient(self, grad: Tensor) -> Tensor:
        out = Tensor.zeros((1, self.filters))
        for sample in TensorIterator(grad, "batches"):
            for f, g_map in enumerate(TensorIterator(sample, "matrix")):
                out.add_value_at(f, g_map.sum())
        return out

    def _weight_gradient(
        self, padded: Tensor, dilated: Tensor, used_h: int, used_w: int
    ) -> Tensor:
        # rows/cols beyond the last window never touch the output
        cropped = padded.trim(0, padded.shape.cols - used_w, padded.shape.rows - used_h, 0)
        out = Tensor.zeros(self._weights.shape.clone())
        for sample, g_sample in zip(
            TensorIterator(cropped, "batches"), TensorIterator(dilated, "batches")
        ):
            targets = TensorIterator(out, "matrix")
            for g_map in TensorIterator(g_sample, "matrix"):
                for x_map in TensorIterator(sample, "matrix"):
                    x_map.cross_correlate(g_map, (1, 1), out=next(targets))
        return out

    def _input_gradient(
        self, padded_shape: Shape, dilated: Tensor, used_h: int, used_w: int
    ) -> Tensor:
        kh, kw = self.kernel_size
        batches, channels, rows, cols = padded_shape.as_4d()
        spread = dilated.pad(kh - 1, kw - 1)
        covered = Tensor.zeros((batches, channels, used_h, used_w))
        for g_sample, dx_sample in zip(
            TensorIterator(spread, "batches"), TensorIterator(covered, "batches")
        ):
            kernels = TensorIterator(self._weights, "matrix")
            for g_map in TensorIterator(g_sample, "matrix"):
                for dx_map in TensorIterator(dx_sample, "matrix"):
                    g_map.convolve(next(kernels), (1, 1), out=dx_map)

        full = covered.pad(0, cols - used_w, rows - used_h, 0)
        return full.trim(*self.padding).reshape(self._input_shape)

    def get_config(self) -> Dict[str, Any]:
        return {
            "filters": self.filters,
            "activation": self.activation.kind,
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
    ) -> "Conv2D":
        owner = cls.__name__
        layer = cls(
            filters=config_int(cfg, "filters", owner),
            kernel_size=config_ints(cfg, "kernel_size", owner, 2),
            strides=config_ints(cfg, "strides", owner, 2),
            mode=config_str(cfg, "mode", owner),
            activation=config_str(cfg, "activation", owner),
        )
        padding = config_ints(cfg, "padding", owner, 4)
        if min(padding) < 0:
            raise ConfigurationError(f"{owner} padding must be non-negative, got {padding}.")
        layer.padding = padding

        kh, kw = layer.kernel_size
        per_channel = layer.filters * kh * kw
        if weights is None or len(weights) == 0 or len(weights) % per_channel != 0:
            raise ConfigurationError(
                f"{owner} weights must hold a multiple of {per_channel} values."
            )
        channels = len(weights) // per_channel
        layer._weights = Tensor.from_data((layer.filters, channels, kh, kw), weights)
        layer._biases = Tensor.from_data(
            (1, layer.filters),
            parameter_tensor_data(biases, layer.filters, f"{owner} biases"),
        )
        return layer
