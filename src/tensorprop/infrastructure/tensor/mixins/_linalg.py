"""
Linear algebra and convolution primitives.

This module defines `TensorMixinLinalg`:

- `matmul`: matrix product whose output rows are computed as independent
  tasks on a shared thread pool (small products run inline).
- `cross_correlate` / `convolve`: multichannel 2-D sliding-window products
  with strides, accumulating into an optional output matrix.
"""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Optional, Sequence, Tuple, Union

import numpy as np

from ....domain._errors import DomainError, PreconditionError, ShapeMismatchError
from .._shape import Shape

if TYPE_CHECKING:
    from .._tensor import Tensor

# Products with fewer multiply-adds than this run on the calling thread.
PARALLEL_MIN_WORK = 1 << 16
MAX_WORKERS = min(8, os.cpu_count() or 1)

_POOL: Optional[ThreadPoolExecutor] = None
_POOL_LOCK = threading.Lock()


def _row_pool() -> ThreadPoolExecutor:
    global _POOL
    with _POOL_LOCK:
        if _POOL is None:
            _POOL = ThreadPoolExecutor(
                max_workers=MAX_WORKERS, thread_name_prefix="tensorprop-matmul"
            )
        return _POOL


def _pair(value: Union[int, Sequence[int]], name: str) -> Tuple[int, int]:
    if isinstance(value, int):
        return value, value
    values = tuple(int(v) for v in value)
    if len(values) != 2:
        raise DomainError(f"{name} must have 2 entries, got {values}.")
    return values[0], values[1]


class TensorMixinLinalg:
    """
    Mixin providing matrix multiplication and 2-D correlation.
    """

    def matmul(self: "Tensor", other: "Tensor") -> "Tensor":
        """
        Matrix product ``self @ other``.

        The right operand is transposed once so every output row is a set of
        contiguous dot products; rows are dispatched to a thread pool and
        joined before returning. Each task writes a disjoint output row.

        Raises
        ------
        PreconditionError
            If either operand is not a matrix.
        ShapeMismatchError
            If the inner dimensions differ.
        """
        if not (self._shape.is_matrix() and other.shape.is_matrix()):
            raise PreconditionError(
                f"matmul requires matrices, got {self._shape!r} and {other.shape!r}."
            )
        m, n = self._shape.rows, self._shape.cols
        if other.shape.rows != n:
            raise ShapeMismatchError("matmul", f"({n}, *)", other.shape)
        p = other.shape.cols

        left = self._as_matrix()
        right_t = other.transpose()._as_matrix()
        out = np.zeros((m, p), dtype=self._data.dtype)

        def compute_row(i: int) -> None:
            out[i] = right_t @ left[i]

        if m > 1 and m * n * p >= PARALLEL_MIN_WORK:
            # list() joins the tasks and re-raises the first failure
            list(_row_pool().map(compute_row, range(m)))
        else:
            for i in range(m):
                compute_row(i)
        return type(self)._wrap(Shape((m, p)), out.reshape(-1))

    def _correlate(
        self: "Tensor",
        kernel: "Tensor",
        strides: Union[int, Sequence[int]],
        out: Optional["Tensor"],
        flip: bool,
        op: str,
    ) -> "Tensor":
        stride_rows, stride_cols = _pair(strides, f"{op} strides")
        if stride_rows < 1 or stride_cols < 1:
            raise DomainError(f"{op} strides must be >= 1, got {(stride_rows, stride_cols)}.")

        batches, channels, rows, cols = self._shape.as_4d()
        k_batches, k_channels, k_rows, k_cols = kernel.shape.as_4d()
        if batches != 1 or k_batches != 1:
            raise PreconditionError(
                f"{op} requires single-batch operands, got {self._shape!r} and {kernel.shape!r}."
            )
        if channels != k_channels:
            raise ShapeMismatchError(f"{op} channels", channels, k_channels)
        if k_rows > rows or k_cols > cols:
            raise ShapeMismatchError(f"{op} kernel", f"at most ({rows}, {cols})", kernel.shape)

        out_rows = (rows - k_rows) // stride_rows + 1
        out_cols = (cols - k_cols) // stride_cols + 1
        if out is None:
            out = type(self).zeros((out_rows, out_cols))
        elif not out.shape.eq((out_rows, out_cols)):
            raise ShapeMismatchError(f"{op} out", (out_rows, out_cols), out.shape)

        source = self._data.reshape(channels, rows, cols)
        weights = kernel._data.reshape(channels, k_rows, k_cols)
        if flip:
            weights = weights[:, ::-1, ::-1]
        acc = out._as_matrix()
        row_span = stride_rows * (out_rows - 1) + 1
        col_span = stride_cols * (out_cols - 1) + 1
        for ki in range(k_rows):
            for kj in range(k_cols):
                window = source[
                    :, ki : ki + row_span : stride_rows, kj : kj + col_span : stride_cols
                ]
                acc += np.tensordot(weights[:, ki, kj], window, axes=(0, 0))
        return out

    def cross_correlate(
        self: "Tensor",
        kernel: "Tensor",
        strides: Union[int, Sequence[int]] = (1, 1),
        out: Optional["Tensor"] = None,
    ) -> "Tensor":
        """
        Multichannel 2-D cross-correlation.

        ``out[i, j] += sum_{c, a, b} self[c, i*sr + a, j*sc + b] * kernel[c, a, b]``

        Parameters
        ----------
        kernel : Tensor
            ``(channels, k_rows, k_cols)`` kernel; channels must match.
        strides : int | Sequence[int], optional
            Row and column strides. Defaults to ``(1, 1)``.
        out : Tensor, optional
            Accumulation target of shape
            ``((rows - k_rows)//sr + 1, (cols - k_cols)//sc + 1)``. Results are
            added to its contents. A new zero matrix is used when omitted.

        Returns
        -------
        Tensor
            ``out`` (or the newly allocated result).
        """
        return self._correlate(kernel, strides, out, flip=False, op="cross_correlate")

    def convolve(
        self: "Tensor",
        kernel: "Tensor",
        strides: Union[int, Sequence[int]] = (1, 1),
        out: Optional["Tensor"] = None,
    ) -> "Tensor":
        """
        Multichannel 2-D convolution: cross-correlation with the kernel
        rotated by 180 degrees. Same contract as `cross_correlate`.
        """
        return self._correlate(kernel, strides, out, flip=True, op="convolve")
