"""
Lazy sub-tensor iteration.

`TensorIterator` walks a tensor's flat buffer in fixed-size, contiguous
windows and yields each window as a *view* tensor that shares the parent's
buffer. Writing through a yielded view (e.g. ``view.add(x, in_place=True)``)
mutates the parent.

The iterator is forward-only and single-pass; create a new one to restart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from ._shape import Shape
from ...domain._errors import ConfigurationError, PreconditionError

if TYPE_CHECKING:
    from ._tensor import Tensor

BATCHES = "batches"
MATRIX = "matrix"
ROWS = "rows"
CELLS = "cells"

_KIND_ALIASES: Dict[str, str] = {
    "b": BATCHES,
    "batch": BATCHES,
    "batches": BATCHES,
    "": MATRIX,
    "m": MATRIX,
    "mat": MATRIX,
    "matrix": MATRIX,
    "matrices": MATRIX,
    "channel": MATRIX,
    "channels": MATRIX,
    "r": ROWS,
    "row": ROWS,
    "rows": ROWS,
    "c": CELLS,
    "cell": CELLS,
    "cells": CELLS,
    "col": CELLS,
    "cols": CELLS,
    "column": CELLS,
    "columns": CELLS,
}


def _slice_shape(parent: Shape, kind: str) -> Shape:
    batches, channels, rows, cols = parent.as_4d()
    if kind == BATCHES:
        if channels > 1:
            return Shape((channels, rows, cols))
        return Shape((rows, cols))
    if kind == ROWS:
        return Shape((1, cols))
    if kind == CELLS:
        return Shape((1, 1))
    return Shape((rows, cols))


class TensorIterator:
    """
    Forward-only iterator over contiguous sub-tensor views.

    Parameters
    ----------
    tensor : Tensor
        Parent tensor whose buffer is walked.
    kind : str, optional
        Slice kind: ``"batches"`` (one batch's channel x row x col block),
        ``"matrix"`` / ``"channels"`` (one rows x cols matrix, the default),
        ``"rows"`` (1 x cols) or ``"cells"`` (1 x 1).

    Raises
    ------
    PreconditionError
        If the parent has fewer than two dimensions.
    ConfigurationError
        If ``kind`` is not a known slice kind.

    Examples
    --------
    >>> for row in TensorIterator(t, "rows"):
    ...     row.scalar_multiply(2.0, in_place=True)
    """

    def __init__(self, tensor: "Tensor", kind: str = MATRIX) -> None:
        if tensor.shape.dims < 2:
            raise PreconditionError(
                f"TensorIterator needs a tensor with at least 2 dims, got {tensor.shape!r}."
            )
        try:
            self.kind = _KIND_ALIASES[kind.lower()]
        except KeyError as e:
            raise ConfigurationError(f"Unknown iterator kind: {kind!r}.") from e

        self._tensor = tensor
        self._slice_shape = _slice_shape(tensor.shape, self.kind)
        self._slice_size = self._slice_shape.total_size
        self._step = 0

    @property
    def slice_shape(self) -> Shape:
        return self._slice_shape.clone()

    def __iter__(self) -> "TensorIterator":
        return self

    def has_next(self) -> bool:
        """Return whether another full window fits in the parent."""
        end = (self._step + 1) * self._slice_size
        return self._slice_size > 0 and end <= self._tensor.size

    def __next__(self) -> "Tensor":
        if not self.has_next():
            raise StopIteration
        start = self._step * self._slice_size
        self._step += 1
        return self._tensor._view(self._slice_shape.clone(), start, start + self._slice_size)

    def __len__(self) -> int:
        """Number of windows not yet yielded."""
        if self._slice_size == 0:
            return 0
        return self._tensor.size // self._slice_size - self._step
