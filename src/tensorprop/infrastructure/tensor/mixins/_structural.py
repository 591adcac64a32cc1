"""
Structural tensor operations.

This module defines `TensorMixinStructural`: reshaping, transposition,
padding and trimming, tiling, dilation, slicing and label utilities.

Padding convention
------------------
`pad` and `trim` accept one to four sizes, following the CSS box order:

- ``(all,)``
- ``(vertical, horizontal)``
- ``(top, horizontal, bottom)``
- ``(top, right, bottom, left)``

The same convention is used by both, so ``t.pad(*p).trim(*p)`` restores
``t``. Both operate on every matrix slice of the tensor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Tuple

import numpy as np

from ....domain._errors import DomainError, PreconditionError, ShapeMismatchError
from .._iterator import TensorIterator
from .._shape import Shape, ShapeLike, tensor_shape

if TYPE_CHECKING:
    from .._tensor import Tensor


def resolve_sides(sizes: Tuple[int, ...], op: str) -> Tuple[int, int, int, int]:
    """
    Expand 1-4 side sizes to ``(top, right, bottom, left)``.

    Raises
    ------
    DomainError
        If the number of sizes is not 1-4 or any size is negative.
    """
    values = [int(s) for s in sizes]
    if len(values) == 1:
        top = right = bottom = left = values[0]
    elif len(values) == 2:
        top = bottom = values[0]
        right = left = values[1]
    elif len(values) == 3:
        top, right, bottom = values
        left = right
    elif len(values) == 4:
        top, right, bottom, left = values
    else:
        raise DomainError(f"{op} expects 1 to 4 sizes, got {len(values)}.")
    if min(top, right, bottom, left) < 0:
        raise DomainError(f"{op} sizes must be non-negative, got {values}.")
    return top, right, bottom, left


class TensorMixinStructural:
    """
    Mixin providing shape-changing and slicing operations.
    """

    def reshape(self: "Tensor", shape: ShapeLike) -> "Tensor":
        """
        Replace the shape in place; the buffer is untouched.

        Raises
        ------
        ShapeMismatchError
            If the new shape holds a different number of elements.
        """
        new_shape = tensor_shape(shape)
        if new_shape.total_size != self._data.size:
            raise ShapeMismatchError(
                "reshape", f"{self._data.size} elements", new_shape
            )
        self._shape = new_shape
        return self

    def transpose(self: "Tensor", in_place: bool = False) -> "Tensor":
        """
        Transpose every matrix slice (swap the trailing two dimensions).
        """
        out = np.empty_like(self._data)
        rows, cols = self._shape.rows, self._shape.cols
        size = rows * cols
        for i, mat in enumerate(TensorIterator(self, "matrix")):
            out[i * size : (i + 1) * size] = mat._as_matrix().T.reshape(-1)
        if in_place:
            self._data[...] = out
            self._shape.transpose()
            return self
        return type(self)._wrap(self._shape.clone().transpose(), out)

    def pad(self: "Tensor", *sizes: int, value: float = 0.0) -> "Tensor":
        """
        Surround every matrix slice with ``value``.

        Parameters
        ----------
        *sizes : int
            One to four side sizes (see module docstring).
        value : float, optional
            Fill value for the new border cells.
        """
        top, right, bottom, left = resolve_sides(sizes, "pad")
        rows, cols = self._shape.rows, self._shape.cols
        out_shape = self._shape.with_matrix(top + rows + bottom, left + cols + right)
        out = type(self).full(out_shape, value)
        out._as_4d()[:, :, top : top + rows, left : left + cols] = self._as_4d()
        return out

    def trim(self: "Tensor", *sizes: int) -> "Tensor":
        """
        Remove a border from every matrix slice.

        Raises
        ------
        PreconditionError
            If trimming would leave no rows or no columns.
        """
        top, right, bottom, left = resolve_sides(sizes, "trim")
        rows, cols = self._shape.rows, self._shape.cols
        new_rows = rows - top - bottom
        new_cols = cols - left - right
        if new_rows < 1 or new_cols < 1:
            raise PreconditionError(
                f"trim {(top, right, bottom, left)} leaves nothing of {self._shape!r}."
            )
        window = self._as_4d()[:, :, top : top + new_rows, left : left + new_cols]
        return type(self)(self._shape.with_matrix(new_rows, new_cols), window)

    def tile(self: "Tensor", reps_rows: int, reps_cols: int) -> "Tensor":
        """
        Repeat every matrix slice ``reps_rows`` x ``reps_cols`` times.
        """
        if reps_rows < 1 or reps_cols < 1:
            raise DomainError(f"tile repetitions must be >= 1, got {(reps_rows, reps_cols)}.")
        rows, cols = self._shape.rows, self._shape.cols
        tiled = np.tile(self._as_4d(), (1, 1, reps_rows, reps_cols))
        return type(self)(self._shape.with_matrix(rows * reps_rows, cols * reps_cols), tiled)

    def dilate(self: "Tensor", rows: int, cols: int) -> "Tensor":
        """
        Insert ``rows`` zero rows and ``cols`` zero columns between the
        elements of every matrix slice.
        """
        if rows < 0 or cols < 0:
            raise DomainError(f"dilate sizes must be non-negative, got {(rows, cols)}.")
        in_rows, in_cols = self._shape.rows, self._shape.cols
        out_rows = in_rows * (rows + 1) - rows
        out_cols = in_cols * (cols + 1) - cols
        out = type(self).zeros(self._shape.with_matrix(out_rows, out_cols))
        out._as_4d()[:, :, :: rows + 1, :: cols + 1] = self._as_4d()
        return out

    # ------------------------------------------------------------------
    # views and windows
    # ------------------------------------------------------------------
    def batch_slice(self: "Tensor", start: int, end: int) -> "Tensor":
        """
        View of batches ``[start, end)`` sharing the receiver's buffer.

        Raises
        ------
        PreconditionError
            If the bounds are inverted, empty or out of range.
        """
        batches, channels, rows, cols = self._shape.as_4d()
        if not 0 <= start < end <= batches:
            raise PreconditionError(
                f"batch_slice [{start}, {end}) invalid for {batches} batches."
            )
        stride = channels * rows * cols
        return self._view(Shape((end - start, channels, rows, cols)), start * stride, end * stride)

    def slice(self: "Tensor", start: int, end: int) -> "Tensor":
        """
        View of flat elements ``[start, end)`` as a ``(1, end - start)`` row.
        """
        if not 0 <= start < end <= self._data.size:
            raise PreconditionError(
                f"slice [{start}, {end}) invalid for size {self._data.size}."
            )
        return self._view(Shape((1, end - start)), start, end)

    def region_slice(
        self: "Tensor", start_row: int, start_col: int, num_rows: int, num_cols: int
    ) -> Tuple["Tensor", List[int]]:
        """
        Copy a rectangular window out of a matrix.

        Returns
        -------
        Tuple[Tensor, List[int]]
            The ``(num_rows, num_cols)`` window and the flat offsets (into the
            receiver) of every extracted cell, in row-major order.

        Raises
        ------
        PreconditionError
            If the receiver is not a matrix or the window leaves it.
        """
        if not self._shape.is_matrix():
            raise PreconditionError(f"region_slice requires a matrix, got {self._shape!r}.")
        rows, cols = self._shape.rows, self._shape.cols
        if (
            num_rows < 1
            or num_cols < 1
            or start_row < 0
            or start_col < 0
            or start_row + num_rows > rows
            or start_col + num_cols > cols
        ):
            raise PreconditionError(
                f"region ({start_row}, {start_col}, {num_rows}, {num_cols}) "
                f"outside matrix {rows}x{cols}."
            )
        window = self._as_matrix()[
            start_row : start_row + num_rows, start_col : start_col + num_cols
        ]
        indices = [
            (start_row + i) * cols + start_col + j
            for i in range(num_rows)
            for j in range(num_cols)
        ]
        return type(self)((num_rows, num_cols), window), indices

    # ------------------------------------------------------------------
    # labels and scaling
    # ------------------------------------------------------------------
    def one_hot_encode(self: "Tensor", size: int) -> "Tensor":
        """
        Encode every element as an integer class label.

        Returns
        -------
        Tensor
            A ``(self.size, size)`` matrix with one 1.0 per row.

        Raises
        ------
        DomainError
            If ``size`` is not positive or a label falls outside ``[0, size)``.
        """
        if size < 1:
            raise DomainError(f"one_hot_encode size must be positive, got {size}.")
        labels = self._data.astype(np.int64)
        if np.any(labels < 0) or np.any(labels >= size):
            raise DomainError(f"one_hot_encode labels must lie in [0, {size}).")
        out = np.zeros((labels.size, size), dtype=self._data.dtype)
        out[np.arange(labels.size), labels] = 1.0
        return type(self)((labels.size, size), out)

    def normalize(self: "Tensor") -> "Tensor":
        """
        Min-max scale every column of a matrix into ``[0, 1]`` in place.

        Constant columns become 0.
        """
        self._require_matrix("normalize")
        mat = self._as_matrix()
        low = mat.min(axis=0)
        span = mat.max(axis=0) - low
        span[span == 0.0] = 1.0
        mat[...] = (mat - low) / span
        return self
