"""
Concrete Tensor implementation (NumPy backend).

This module provides the `Tensor` class: a flat, contiguous ``float64`` NumPy
buffer interpreted through a rank-4 `Shape` (batch, channel, row, col). Index
``(b, c, r, col)`` maps to ``((b*channels + c)*rows + r)*cols + col``.

Design notes
------------
- Numeric operations live in mixins (elementwise, reduction, structural,
  linear algebra) and are composed into `Tensor` here; this file owns storage,
  factories and element access only.
- Every operation is offered out-of-place (a new buffer) and, where mutation
  is meaningful, in-place (``in_place=True`` writes into the receiver's buffer
  and returns the receiver).
- Views (`TensorIterator` windows, `batch_slice`, `slice`) wrap a slice of the
  parent's NumPy buffer. In-place writes always assign into the existing
  buffer, so parents and views stay coherent.
- A one-dimensional shape ``(n,)`` is stored as the matrix ``(1, n)``.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Union

import numpy as np

from ...domain._tensor import ITensor
from ...domain._errors import DomainError, PreconditionError, ShapeMismatchError
from ._shape import Shape, ShapeLike, tensor_shape
from .mixins import (
    TensorMixinElementwise,
    TensorMixinLinalg,
    TensorMixinReduction,
    TensorMixinStructural,
)

Number = Union[int, float]

DTYPE = np.float64


class Tensor(
    TensorMixinElementwise,
    TensorMixinReduction,
    TensorMixinStructural,
    TensorMixinLinalg,
    ITensor,
):
    """
    Rank-4 float64 tensor backed by a flat NumPy buffer.

    Parameters
    ----------
    shape : Shape | Sequence[int]
        Tensor shape; every dimension must be at least 1.
    data : Sequence[float] | np.ndarray, optional
        Initial values (copied). Must contain exactly ``shape.total_size``
        elements. Defaults to zeros.

    Raises
    ------
    ShapeMismatchError
        If ``data`` has the wrong number of elements.
    DomainError
        If any dimension is smaller than 1.
    """

    def __init__(
        self,
        shape: ShapeLike,
        data: Optional[Union[Sequence[float], np.ndarray]] = None,
    ) -> None:
        shp = tensor_shape(shape)
        if data is None:
            buffer = np.zeros(shp.total_size, dtype=DTYPE)
        else:
            buffer = np.array(data, dtype=DTYPE).reshape(-1)
            if buffer.size != shp.total_size:
                raise ShapeMismatchError(
                    "Tensor", f"{shp.total_size} values for {shp!r}", buffer.size
                )
        self._shape = shp
        self._data = buffer

    # ------------------------------------------------------------------
    # internal constructors
    # ------------------------------------------------------------------
    @classmethod
    def _wrap(cls, shape: Shape, buffer: np.ndarray) -> "Tensor":
        """
        Build a tensor around ``buffer`` without copying it.
        """
        t = cls.__new__(cls)
        t._shape = shape
        t._data = buffer
        return t

    def _view(self, shape: Shape, start: int, end: int) -> "Tensor":
        """
        Return a tensor sharing ``self._data[start:end]``.
        """
        return type(self)._wrap(shape, self._data[start:end])

    def _emit(self, values: Any, in_place: bool) -> "Tensor":
        """
        Store ``values`` into the receiver (in place) or into a new tensor.
        """
        if in_place:
            self._data[...] = values
            return self
        out = np.empty(self._data.size, dtype=DTYPE)
        out[...] = values
        return type(self)._wrap(self._shape.clone(), out)

    def _as_4d(self) -> np.ndarray:
        """Return a (batches, channels, rows, cols) view of the buffer."""
        return self._data.reshape(self._shape.as_4d())

    def _as_matrix(self) -> np.ndarray:
        """Return a (rows, cols) view of the buffer; the tensor must be a matrix."""
        return self._data.reshape(self._shape.rows, self._shape.cols)

    # ------------------------------------------------------------------
    # factories
    # ------------------------------------------------------------------
    @classmethod
    def zeros(cls, shape: ShapeLike) -> "Tensor":
        """Create a zero-filled tensor."""
        return cls(shape)

    @classmethod
    def full(cls, shape: ShapeLike, value: float) -> "Tensor":
        """Create a tensor filled with ``value``."""
        shp = tensor_shape(shape)
        return cls._wrap(shp, np.full(shp.total_size, value, dtype=DTYPE))

    @classmethod
    def rand(
        cls,
        shape: ShapeLike,
        min_val: float = 0.0,
        max_val: float = 1.0,
        rng: Optional[np.random.Generator] = None,
    ) -> "Tensor":
        """
        Create a tensor with values drawn uniformly from ``[min_val, max_val)``.

        Raises
        ------
        DomainError
            If ``min_val > max_val``.
        """
        if min_val > max_val:
            raise DomainError(f"rand: min_val {min_val} exceeds max_val {max_val}.")
        shp = tensor_shape(shape)
        gen = rng if rng is not None else np.random.default_rng()
        return cls._wrap(shp, gen.uniform(min_val, max_val, shp.total_size).astype(DTYPE))

    @classmethod
    def from_data(cls, shape: ShapeLike, data: Sequence[float]) -> "Tensor":
        """
        Create a tensor from a flat sequence of values (copied).
        """
        return cls(shape, data)

    @classmethod
    def from_matrix(cls, rows: Sequence[Sequence[float]]) -> "Tensor":
        """
        Create a matrix from a nested list of rows.

        Raises
        ------
        DomainError
            If ``rows`` is empty or its first row is empty.
        ShapeMismatchError
            If the rows are ragged.
        """
        if len(rows) == 0 or len(rows[0]) == 0:
            raise DomainError("from_matrix requires at least one non-empty row.")
        width = len(rows[0])
        for i, row in enumerate(rows):
            if len(row) != width:
                raise ShapeMismatchError(f"from_matrix row {i}", width, len(row))
        return cls((len(rows), width), [v for row in rows for v in row])

    @classmethod
    def identity(cls, n: int) -> "Tensor":
        """
        Create the ``n x n`` identity matrix.
        """
        if n <= 0:
            raise DomainError(f"identity size must be positive, got {n}.")
        return cls._wrap(Shape((n, n)), np.eye(n, dtype=DTYPE).reshape(-1))

    @classmethod
    def from_numpy(cls, array: np.ndarray) -> "Tensor":
        """
        Create a tensor from a NumPy array (copied), keeping its shape.
        """
        arr = np.asarray(array, dtype=DTYPE)
        return cls(arr.shape, arr.reshape(-1))

    # ------------------------------------------------------------------
    # properties and element access
    # ------------------------------------------------------------------
    @property
    def shape(self) -> Shape:
        """
        The tensor's shape (not a copy; clone before storing it).
        """
        return self._shape

    @property
    def strides(self) -> List[int]:
        return self._shape.calc_strides()

    @property
    def size(self) -> int:
        return int(self._data.size)

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    def _check_index(self, index: int) -> int:
        if not 0 <= index < self._data.size:
            raise PreconditionError(
                f"Index {index} out of range for tensor of size {self._data.size}."
            )
        return int(index)

    def value_at(self, index: int) -> float:
        """Return the element at flat offset ``index``."""
        return float(self._data[self._check_index(index)])

    def set_value_at(self, index: int, value: float) -> None:
        """Overwrite the element at flat offset ``index``."""
        self._data[self._check_index(index)] = value

    def add_value_at(self, index: int, value: float) -> None:
        """Accumulate ``value`` into the element at flat offset ``index``."""
        self._data[self._check_index(index)] += value

    def data_copy(self) -> List[float]:
        """Return the buffer as a list of Python floats."""
        return self._data.tolist()

    def to_numpy(self) -> np.ndarray:
        """Return a copy of the data shaped like the tensor."""
        return self._data.reshape(self._shape.as_tuple()).copy()

    def copy_from_numpy(self, array: np.ndarray) -> "Tensor":
        """
        Overwrite the buffer with the values of ``array`` (same element count).

        Raises
        ------
        ShapeMismatchError
            If ``array`` does not hold exactly ``size`` elements.
        """
        arr = np.asarray(array, dtype=DTYPE)
        if arr.size != self._data.size:
            raise ShapeMismatchError("copy_from_numpy", self._data.size, arr.size)
        self._data[...] = arr.reshape(-1)
        return self

    def copy(self) -> "Tensor":
        """Deep copy with an independent buffer and shape."""
        return type(self)._wrap(self._shape.clone(), self._data.copy())

    def __repr__(self) -> str:
        return f"Tensor(shape={self._shape.as_tuple()}, data={self._data.tolist()})"
