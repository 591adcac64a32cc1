"""
Elementwise tensor operations.

This module defines `TensorMixinElementwise`: mapping, binary arithmetic on
equal shapes, broadcasting ("repeat") arithmetic and scalar arithmetic.

Conventions
-----------
- Binary operations require training-equal (`Shape.eq`) shapes.
- ``rep_*`` operations broadcast the right operand by modulo indexing over
  the four logical dimensions; each of its dimensions must divide the
  receiver's.
- All validation happens before the receiver is mutated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Union

import numpy as np

from ....domain._errors import DomainError, ShapeMismatchError

if TYPE_CHECKING:
    from .._tensor import Tensor

Number = Union[int, float]


class TensorMixinElementwise:
    """
    Mixin providing elementwise and scalar arithmetic.
    """

    def _check_same_shape(self: "Tensor", other: "Tensor", op: str) -> None:
        if not self._shape.eq(other.shape):
            raise ShapeMismatchError(op, self._shape, other.shape)

    def _broadcast_operand(self: "Tensor", other: "Tensor", op: str) -> np.ndarray:
        """
        Expand ``other`` to the receiver's element layout by modulo indexing.
        """
        if not other.shape.broadcastable_to(self._shape):
            raise ShapeMismatchError(
                op, f"dims dividing {self._shape.as_4d()}", other.shape
            )
        b, c, r, k = self._shape.as_4d()
        ob, oc, orr, ok = other.shape.as_4d()
        source = other._as_4d()
        index = np.ix_(
            np.arange(b) % ob,
            np.arange(c) % oc,
            np.arange(r) % orr,
            np.arange(k) % ok,
        )
        return source[index].reshape(-1)

    # ------------------------------------------------------------------
    # mapping
    # ------------------------------------------------------------------
    def map(
        self: "Tensor", fn: Callable[[np.ndarray], np.ndarray], in_place: bool = False
    ) -> "Tensor":
        """
        Apply an elementwise function to the whole buffer.

        Parameters
        ----------
        fn : Callable[[np.ndarray], np.ndarray]
            Vectorized function (e.g. a NumPy ufunc); it receives the flat
            buffer and must return an array of the same length or a scalar.
        in_place : bool, optional
            Write the result into the receiver.
        """
        return self._emit(fn(self._data), in_place)

    def map_batch(
        self: "Tensor",
        fn: Callable[[np.ndarray], np.ndarray],
        *others: "Tensor",
        in_place: bool = False,
    ) -> "Tensor":
        """
        Apply a function to the receiver and several same-shaped operands.

        ``fn`` receives a ``(1 + len(others), size)`` array whose row 0 holds
        the receiver and row ``k`` holds ``others[k-1]``; it must return one
        value per element.

        Raises
        ------
        ShapeMismatchError
            If any operand's shape is not training-equal to the receiver's.
        """
        for other in others:
            self._check_same_shape(other, "map_batch")
        operands = np.stack([self._data] + [o._data for o in others])
        return self._emit(fn(operands), in_place)

    # ------------------------------------------------------------------
    # binary arithmetic
    # ------------------------------------------------------------------
    def add(self: "Tensor", other: "Tensor", in_place: bool = False) -> "Tensor":
        self._check_same_shape(other, "add")
        return self._emit(self._data + other._data, in_place)

    def subtract(self: "Tensor", other: "Tensor", in_place: bool = False) -> "Tensor":
        self._check_same_shape(other, "subtract")
        return self._emit(self._data - other._data, in_place)

    def multiply(self: "Tensor", other: "Tensor", in_place: bool = False) -> "Tensor":
        self._check_same_shape(other, "multiply")
        return self._emit(self._data * other._data, in_place)

    def divide(self: "Tensor", other: "Tensor", in_place: bool = False) -> "Tensor":
        """
        Elementwise division.

        Raises
        ------
        DomainError
            If any denominator is zero (the receiver is left untouched).
        """
        self._check_same_shape(other, "divide")
        if np.any(other._data == 0.0):
            raise DomainError("divide: division by zero.")
        return self._emit(self._data / other._data, in_place)

    def rep_add(self: "Tensor", other: "Tensor", in_place: bool = False) -> "Tensor":
        """
        Broadcasting addition; ``other`` is repeated to the receiver's shape.
        """
        return self._emit(self._data + self._broadcast_operand(other, "rep_add"), in_place)

    def rep_multiply(
        self: "Tensor", other: "Tensor", in_place: bool = False
    ) -> "Tensor":
        """
        Broadcasting multiplication; ``other`` is repeated to the receiver's shape.
        """
        return self._emit(
            self._data * self._broadcast_operand(other, "rep_multiply"), in_place
        )

    # ------------------------------------------------------------------
    # scalar arithmetic
    # ------------------------------------------------------------------
    def scalar_add(self: "Tensor", value: Number, in_place: bool = False) -> "Tensor":
        return self._emit(self._data + value, in_place)

    def scalar_subtract(
        self: "Tensor", value: Number, in_place: bool = False
    ) -> "Tensor":
        return self._emit(self._data - value, in_place)

    def scalar_multiply(
        self: "Tensor", value: Number, in_place: bool = False
    ) -> "Tensor":
        return self._emit(self._data * value, in_place)

    def scalar_divide(
        self: "Tensor", value: Number, in_place: bool = False
    ) -> "Tensor":
        if value == 0:
            raise DomainError("scalar_divide: division by zero.")
        return self._emit(self._data / value, in_place)
