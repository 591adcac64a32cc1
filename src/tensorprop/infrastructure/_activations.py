"""
Activation functions.

Each activation is a small stateful object owned by exactly one layer:
`forward` computes the output and caches a private copy of whatever the
derivative needs, and `backward` maps the upstream gradient (w.r.t. the
activation output) onto the pre-activation values.

Implemented activations
-----------------------
- ``relu``    : max(0, x); caches the input.
- ``sigmoid`` : 1 / (1 + exp(-x)); caches the output.
- ``softmax`` : row-wise normalized exponentials; caches the output.
- ``linear``  : identity (aliases ``none`` and ``""``).

Activations are resolved from string tags through the `Activations` registry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Dict, Optional, Type, Union

import numpy as np

from ..domain._activation import IActivation
from ..domain._errors import ConfigurationError, PreconditionError
from .tensor._tensor import Tensor
from .tensor._iterator import TensorIterator


class Activation(ABC):
    """
    Base class for activations.

    Attributes
    ----------
    kind : str
        Registry tag written to persisted models.
    rectifying : bool
        True for ReLU-family activations (selects He initialization).
    """

    kind: ClassVar[str] = ""
    rectifying: ClassVar[bool] = False

    def __init__(self) -> None:
        self._cache: Optional[Tensor] = None

    def _cached(self) -> Tensor:
        if self._cache is None:
            raise PreconditionError(
                f"{type(self).__name__}.backward called before forward."
            )
        return self._cache

    @abstractmethod
    def forward(self, x: Tensor) -> Tensor: ...

    @abstractmethod
    def backward(self, gradient: Tensor) -> Tensor: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ReLU(Activation):
    """
    Rectified linear unit.

        relu(x)  = max(0, x)
        relu'(x) = 1 if x > 0 else 0
    """

    kind = "relu"
    rectifying = True

    def forward(self, x: Tensor) -> Tensor:
        self._cache = x.copy()
        return x.map(lambda v: np.maximum(v, 0.0))

    def backward(self, gradient: Tensor) -> Tensor:
        mask = self._cached().map(lambda v: (v > 0.0).astype(v.dtype))
        return gradient.multiply(mask)


class Sigmoid(Activation):
    """
    Logistic sigmoid.

        sigmoid(x)  = 1 / (1 + exp(-x))
        sigmoid'(x) = s * (1 - s)

    Notes
    -----
    The output is computed as ``exp(-logaddexp(0, -x))`` so large negative
    inputs do not overflow.
    """

    kind = "sigmoid"

    def forward(self, x: Tensor) -> Tensor:
        out = x.map(lambda v: np.exp(-np.logaddexp(0.0, -v)))
        self._cache = out.copy()
        return out

    def backward(self, gradient: Tensor) -> Tensor:
        s = self._cached()
        return gradient.map_batch(lambda o: o[0] * o[1] * (1.0 - o[1]), s)


class Softmax(Activation):
    """
    Row-wise softmax.

    Every row of every matrix slice is shifted by its maximum, exponentiated
    and normalized to sum to one.

    Backward applies the Jacobian-vector product per row:

        dx = s * (g - dot(g, s))
    """

    kind = "softmax"

    def forward(self, x: Tensor) -> Tensor:
        out = x.copy()
        for row in TensorIterator(out, "rows"):
            row.scalar_subtract(row.max(), in_place=True)
            row.map(np.exp, in_place=True)
            row.scalar_divide(row.sum(), in_place=True)
        self._cache = out.copy()
        return out

    def backward(self, gradient: Tensor) -> Tensor:
        s = self._cached()
        grad_in = gradient.copy()
        for s_row, g_row in zip(
            TensorIterator(s, "rows"), TensorIterator(grad_in, "rows")
        ):
            dot = s_row.multiply(g_row).sum()
            g_row.scalar_subtract(dot, in_place=True)
            g_row.multiply(s_row, in_place=True)
        return grad_in


class Linear(Activation):
    """
    Identity activation.
    """

    kind = "linear"

    def __init__(self) -> None:
        super().__init__()
        self._forwarded = False

    def forward(self, x: Tensor) -> Tensor:
        self._forwarded = True
        return x

    def backward(self, gradient: Tensor) -> Tensor:
        if not self._forwarded:
            raise PreconditionError("Linear.backward called before forward.")
        return gradient


Activations: Dict[str, Type[Activation]] = {
    "relu": ReLU,
    "sigmoid": Sigmoid,
    "softmax": Softmax,
    "linear": Linear,
    "none": Linear,
    "": Linear,
}


def get_activation(tag: Optional[str]) -> Activation:
    """
    Create a fresh activation for a registry tag.

    Raises
    ------
    ConfigurationError
        If the tag is unknown.
    """
    key = "" if tag is None else str(tag).lower()
    try:
        return Activations[key]()
    except KeyError as e:
        available = ", ".join(sorted(k for k in Activations if k))
        raise ConfigurationError(
            f"Unknown activation {tag!r}. Available: {available}"
        ) from e


def resolve_activation(activation: Union[str, IActivation, None]) -> IActivation:
    """
    Accept either a registry tag or an activation instance.
    """
    if activation is None or isinstance(activation, str):
        return get_activation(activation)
    if isinstance(activation, IActivation):
        return activation
    raise ConfigurationError(f"Cannot use {activation!r} as an activation.")
