"""
Tensor interface definitions.

This module defines the domain-level interface for tensor-like objects using
structural typing. The interface captures the surface that layers,
activations, losses and optimizers rely on, so the domain contracts can be
typed without importing the NumPy-backed implementation.
"""

from __future__ import annotations

from typing import Any, Callable, List, Protocol, Sequence, runtime_checkable


@runtime_checkable
class IShape(Protocol):
    """
    Shape interface.

    A shape is a sequence of up to four dimensions read from the right as
    (cols, rows, channels, batches). Missing leading dimensions read as 1.
    """

    @property
    def rows(self) -> int: ...

    @property
    def cols(self) -> int: ...

    @property
    def channels(self) -> int: ...

    @property
    def batches(self) -> int: ...

    @property
    def total_size(self) -> int: ...

    def eq(self, other: "IShape") -> bool:
        """
        Compare the four logical dimensions of two shapes.
        """
        ...

    def clone(self) -> "IShape": ...


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` is a flat float64 buffer interpreted through an `IShape`.
    Every numeric operation is available out-of-place (returns a new tensor)
    and, where mutation is meaningful, in-place (``in_place=True`` mutates
    and returns the receiver).

    Notes
    -----
    - The protocol is structural; any object providing these members is an
      `ITensor` for typing and ``isinstance`` purposes.
    - It intentionally lists only the operations the layer and optimizer
      contracts depend on.
    """

    @property
    def shape(self) -> IShape:
        """
        Return the shape of the tensor.

        Returns
        -------
        IShape
            The tensor's shape. Callers that store it must clone it first.
        """
        ...

    @property
    def size(self) -> int:
        """
        Return the number of elements in the buffer.
        """
        ...

    def copy(self) -> "ITensor": ...

    def data_copy(self) -> List[float]: ...

    def reshape(self, shape: Sequence[int] | IShape) -> "ITensor": ...

    def map(
        self, fn: Callable[[Any], Any], in_place: bool = False
    ) -> "ITensor": ...

    def add(self, other: "ITensor", in_place: bool = False) -> "ITensor": ...

    def subtract(self, other: "ITensor", in_place: bool = False) -> "ITensor": ...

    def multiply(self, other: "ITensor", in_place: bool = False) -> "ITensor": ...

    def matmul(self, other: "ITensor") -> "ITensor": ...

    def sum(self) -> float: ...
