"""
Reduction tensor operations.

This module defines `TensorMixinReduction`: whole-buffer reductions returning
Python floats, extremal-index lookups returning flat offsets, and per-axis
reductions on matrices.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import numpy as np

from ....domain._errors import DomainError, PreconditionError
from .._iterator import TensorIterator

if TYPE_CHECKING:
    from .._tensor import Tensor


class TensorMixinReduction:
    """
    Mixin providing reductions over the tensor buffer.

    Notes
    -----
    - Index-returning reductions report the *first* occurrence on ties.
    - Axis reductions require a matrix (batches == channels == 1).
    """

    def sum(self: "Tensor") -> float:
        return float(np.sum(self._data))

    def avg(self: "Tensor") -> float:
        return float(np.mean(self._data))

    def min(self: "Tensor") -> float:
        return float(np.min(self._data))

    def max(self: "Tensor") -> float:
        return float(np.max(self._data))

    def max_index(self: "Tensor") -> int:
        """Flat offset of the largest element."""
        return int(np.argmax(self._data))

    def min_index(self: "Tensor") -> int:
        """Flat offset of the smallest element."""
        return int(np.argmin(self._data))

    def avg_index(self: "Tensor") -> int:
        """Flat offset of the element closest to the mean."""
        return int(np.argmin(np.abs(self._data - np.mean(self._data))))

    def _require_matrix(self: "Tensor", op: str) -> None:
        if not self._shape.is_matrix():
            raise PreconditionError(f"{op} requires a matrix, got {self._shape!r}.")

    def axis_sum(self: "Tensor", axis: int) -> "Tensor":
        """
        Sum a matrix along one axis.

        Parameters
        ----------
        axis : int
            0 sums each column into a ``(1, cols)`` row;
            1 sums each row into a ``(rows, 1)`` column.

        Raises
        ------
        PreconditionError
            If the tensor is not a matrix.
        DomainError
            If ``axis`` is not 0 or 1.
        """
        self._require_matrix("axis_sum")
        mat = self._as_matrix()
        if axis == 0:
            return type(self)((1, self._shape.cols), mat.sum(axis=0))
        if axis == 1:
            return type(self)((self._shape.rows, 1), mat.sum(axis=1))
        raise DomainError(f"axis_sum axis must be 0 or 1, got {axis}.")

    def arg_max(self: "Tensor", axis: int = 1) -> List[int]:
        """
        Index of the largest element per row (``axis=1``) or per column
        (``axis=0``).

        Rows are taken across every matrix slice of the tensor; the column
        form requires a matrix.
        """
        if axis == 1:
            return [row.max_index() for row in TensorIterator(self, "rows")]
        if axis == 0:
            self._require_matrix("arg_max")
            return [int(i) for i in np.argmax(self._as_matrix(), axis=0)]
        raise DomainError(f"arg_max axis must be 0 or 1, got {axis}.")
