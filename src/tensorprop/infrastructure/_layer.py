"""
Layer base class.

`Layer` provides the shared state handling for every concrete layer:
parameter/gradient storage, the compile and forward preconditions, and the
registry-backed type tag used for persistence. Subclasses implement
`compile_layer`, `forward` and `backward`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Optional, Sequence, TypeVar

from ..domain._errors import PreconditionError
from .tensor._shape import Shape, ShapeLike
from .tensor._tensor import Tensor

C = TypeVar("C")


class Layer(ABC):
    """
    Base class for network layers.

    Attributes
    ----------
    layer_type : str
        Registry tag; set by `register_layer`.
    """

    layer_type: ClassVar[str] = ""

    def __init__(self) -> None:
        self._weights: Optional[Tensor] = None
        self._biases: Optional[Tensor] = None
        self._weights_gradient: Optional[Tensor] = None
        self._biases_gradient: Optional[Tensor] = None
        self._output_shape: Optional[Shape] = None

    # ------------------------------------------------------------------
    # parameters
    # ------------------------------------------------------------------
    @property
    def weights(self) -> Optional[Tensor]:
        return self._weights

    @property
    def biases(self) -> Optional[Tensor]:
        return self._biases

    @property
    def weights_gradient(self) -> Optional[Tensor]:
        return self._weights_gradient

    @property
    def biases_gradient(self) -> Optional[Tensor]:
        return self._biases_gradient

    @property
    def output_shape(self) -> Optional[Shape]:
        """Per-sample output shape recorded by `compile_layer`."""
        return None if self._output_shape is None else self._output_shape.clone()

    def parameter_count(self) -> int:
        return sum(t.size for t in (self._weights, self._biases) if t is not None)

    # ------------------------------------------------------------------
    # preconditions
    # ------------------------------------------------------------------
    def _require_parameters(self) -> Tensor:
        if self._weights is None or self._biases is None:
            raise PreconditionError(
                f"{type(self).__name__} used before compile_layer()."
            )
        return self._weights

    def _require_forward(self, cached: Optional[C]) -> C:
        if cached is None:
            raise PreconditionError(
                f"{type(self).__name__}.backward called before forward."
            )
        return cached

    # ------------------------------------------------------------------
    # contract
    # ------------------------------------------------------------------
    @abstractmethod
    def compile_layer(self, input_shape: ShapeLike) -> Shape: ...

    @abstractmethod
    def forward(self, x: Tensor) -> Tensor: ...

    @abstractmethod
    def backward(self, gradient: Tensor) -> Tensor: ...

    @abstractmethod
    def get_config(self) -> Dict[str, Any]: ...

    @classmethod
    @abstractmethod
    def from_config(
        cls,
        cfg: Dict[str, Any],
        weights: Optional[Sequence[float]] = None,
        biases: Optional[Sequence[float]] = None,
    ) -> "Layer": ...

    def __repr__(self) -> str:
        cfg = ", ".join(f"{k}={v!r}" for k, v in self.get_config().items())
        return f"{type(self).__name__}({cfg})"
