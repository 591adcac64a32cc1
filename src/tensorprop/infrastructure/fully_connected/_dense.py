"""
Fully connected (dense) layer.

`Dense` computes ``activation(X @ W + b)`` where the input is viewed as a
``(total / cols, cols)`` matrix, ``W`` is ``(in_features, units)`` and ``b`` is
``(1, units)`` broadcast over the rows.

Backward
--------
With ``G`` the gradient w.r.t. the pre-activation output:

    dW = X^T @ G
    db = column sums of G
    dX = G @ W^T   (reshaped to the input's shape)
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Union

from ...domain._activation import IActivation
from ...domain._errors import ConfigurationError, DomainError, ShapeMismatchError
from .._activations import resolve_activation
from .._layer import Layer
from ..module._serialization_core import (
    config_int,
    config_str,
    parameter_tensor_data,
    register_layer,
)
from ..tensor._shape import Shape, ShapeLike, as_shape
from ..tensor._tensor import Tensor
from ..utils.weight_initializer import WeightInitializer


@register_layer()
class Dense(Layer):
    """
    Fully connected layer.

    Parameters
    ----------
    units : int
        Number of output features. Must be positive.
    activation : str | IActivation, optional
        Output activation. Defaults to ``"linear"``.

    Notes
    -----
    Weights use He initialization when the activation is rectifying and
    Xavier initialization otherwise; biases start at zero.
    """

    def __init__(
        self, units: int, activation: Union[str, IActivation, None] = "linear"
    ) -> None:
        super().__init__()
        if int(units) < 1:
            raise DomainError(f"Dense units must be positive, got {units}.")
        self.units = int(units)
        self.activation = resolve_activation(activation)

        self._input: Optional[Tensor] = None
        self._input_shape: Optional[Shape] = None

    def compile_layer(self, input_shape: ShapeLike) -> Shape:
        in_features = as_shape(input_shape).cols
        if in_features < 1:
            raise ShapeMismatchError("Dense input", "at least 1 column", input_shape)

        self._weights = Tensor.zeros((in_features, self.units))
        WeightInitializer.for_activation(self.activation.rectifying)(self._weights)
        self._biases = Tensor.zeros((1, self.units))
        self._weights_gradient = None
        self._biases_gradient = None

        self._output_shape = Shape((1, self.units))
        return self._output_shape.clone()

    def forward(self, x: Tensor) -> Tensor:
        weights = self._require_parameters()
        cols = x.shape.cols
        if cols != weights.shape.rows:
            raise ShapeMismatchError("Dense input cols", weights.shape.rows, cols)

        self._input_shape = x.shape.clone()
        self._input = x.copy().reshape((x.size // cols, cols))
        out = self._input.matmul(weights)
        out.rep_add(self._biases, in_place=True)
        return self.activation.forward(out)

    def backward(self, gradient: Tensor) -> Tensor:
        cached = self._require_forward(self._input)
        grad = self.activation.backward(gradient)
        rows = cached.shape.rows
        if grad.size != rows * self.units:
            raise ShapeMismatchError("Dense gradient", (rows, self.units), grad.shape)
        if not grad.shape.eq((rows, self.units)):
            grad = grad.copy().reshape((rows, self.units))

        self._weights_gradient = cached.transpose().matmul(grad)
        self._biases_gradient = grad.axis_sum(0)
        return grad.matmul(self._weights.transpose()).reshape(self._input_shape)

    def get_config(self) -> Dict[str, Any]:
        return {"units": self.units, "activation": self.activation.kind}

    @classmethod
    def from_config(
        cls,
        cfg: Dict[str, Any],
        weights: Optional[Sequence[float]] = None,
        biases: Optional[Sequence[float]] = None,
    ) -> "Dense":
        owner = cls.__name__
        layer = cls(
            units=config_int(cfg, "units", owner),
            activation=config_str(cfg, "activation", owner),
        )
        if weights is None or len(weights) == 0 or len(weights) % layer.units != 0:
            raise ConfigurationError(
                f"{owner} weights must hold a multiple of {layer.units} values."
            )
        layer._weights = Tensor.from_data((len(weights) // layer.units, layer.units), weights)
        layer._biases = Tensor.from_data(
            (1, layer.units), parameter_tensor_data(biases, layer.units, f"{owner} biases")
        )
        return layer
