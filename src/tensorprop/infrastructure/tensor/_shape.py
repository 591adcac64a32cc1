"""
Tensor shape descriptor.

A `Shape` is a mutable sequence of up to four non-negative dimensions read
from the right as (cols, rows, channels, batches). Leading dimensions that are
not present read as 1, so ``Shape((3, 4))`` and ``Shape((1, 1, 3, 4))`` are
"training-equal" (`eq`) even though they are not `deep_eq`.

Shapes are mutable (`transpose` swaps the trailing two dimensions in place),
so any owner that stores a shape received from elsewhere must `clone` it.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, Tuple, Union

from ...domain._errors import DomainError, PreconditionError, ShapeMismatchError

MAX_DIMS = 4

ShapeLike = Union["Shape", Sequence[int]]


class Shape:
    """
    Dimension vector with positional accessors.

    Parameters
    ----------
    dims : Iterable[int]
        Dimensions ordered outermost first, at most four of them.

    Raises
    ------
    DomainError
        If any dimension is negative.
    ShapeMismatchError
        If more than four dimensions are given.
    """

    __slots__ = ("_dims",)
    __hash__ = None  # mutable

    def __init__(self, dims: Iterable[int] = ()) -> None:
        if isinstance(dims, Shape):
            values = list(dims._dims)
        else:
            values = [int(d) for d in dims]
        if len(values) > MAX_DIMS:
            raise ShapeMismatchError("Shape", f"at most {MAX_DIMS} dims", values)
        for d in values:
            if d < 0:
                raise DomainError(f"Shape dimensions must be non-negative, got {values}.")
        self._dims: List[int] = values

    # ------------------------------------------------------------------
    # sequence protocol
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._dims)

    def __iter__(self) -> Iterator[int]:
        return iter(self._dims)

    def __getitem__(self, index: int) -> int:
        return self._dims[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Shape):
            return self.deep_eq(other)
        if isinstance(other, (tuple, list)):
            return tuple(self._dims) == tuple(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Shape({tuple(self._dims)})"

    # ------------------------------------------------------------------
    # positional accessors
    # ------------------------------------------------------------------
    def _from_right(self, offset: int) -> int:
        if len(self._dims) < offset:
            return 1
        return self._dims[-offset]

    @property
    def cols(self) -> int:
        """Rightmost dimension; 0 for an empty shape."""
        if not self._dims:
            return 0
        return self._dims[-1]

    @property
    def rows(self) -> int:
        return self._from_right(2)

    @property
    def channels(self) -> int:
        return self._from_right(3)

    @property
    def batches(self) -> int:
        return self._from_right(4)

    @property
    def dims(self) -> int:
        """Number of stored dimensions."""
        return len(self._dims)

    @property
    def total_size(self) -> int:
        """Product of all dimensions; 0 for an empty shape."""
        if not self._dims:
            return 0
        total = 1
        for d in self._dims:
            total *= d
        return total

    def dim_size(self, index: int) -> int:
        """
        Return the dimension stored at ``index``.

        Raises
        ------
        PreconditionError
            If ``index`` is outside ``[0, dims)``.
        """
        if not 0 <= index < len(self._dims):
            raise PreconditionError(
                f"dim_size index {index} out of range for {self!r}."
            )
        return self._dims[index]

    def as_tuple(self) -> Tuple[int, ...]:
        return tuple(self._dims)

    def as_4d(self) -> Tuple[int, int, int, int]:
        """Return the four logical dimensions (batches, channels, rows, cols)."""
        return self.batches, self.channels, self.rows, self.cols

    # ------------------------------------------------------------------
    # derived values
    # ------------------------------------------------------------------
    def calc_strides(self) -> List[int]:
        """
        Row-major strides: the rightmost dimension has stride 1.

        Raises
        ------
        PreconditionError
            If the shape is empty.
        """
        if not self._dims:
            raise PreconditionError("Cannot compute strides of an empty shape.")
        strides = [1] * len(self._dims)
        for i in range(len(self._dims) - 2, -1, -1):
            strides[i] = strides[i + 1] * self._dims[i + 1]
        return strides

    def clone(self) -> "Shape":
        return Shape(self._dims)

    def eq(self, other: ShapeLike) -> bool:
        """
        Training equality: compare batches, channels, rows and cols.
        """
        return self.as_4d() == as_shape(other).as_4d()

    def deep_eq(self, other: ShapeLike) -> bool:
        """
        Structural equality: same number of dimensions with the same values.
        """
        return self._dims == list(as_shape(other)._dims)

    def transpose(self) -> "Shape":
        """
        Swap the last two dimensions in place and return the receiver.

        Raises
        ------
        PreconditionError
            If the shape has fewer than two dimensions.
        """
        if len(self._dims) < 2:
            raise PreconditionError(f"Cannot transpose {self!r}; need at least 2 dims.")
        self._dims[-1], self._dims[-2] = self._dims[-2], self._dims[-1]
        return self

    def with_matrix(self, rows: int, cols: int) -> "Shape":
        """
        Return a copy whose trailing two dimensions are replaced.
        """
        dims = list(self._dims)
        if len(dims) < 2:
            return Shape((rows, cols))
        dims[-2], dims[-1] = rows, cols
        return Shape(dims)

    def is_matrix(self) -> bool:
        """True when batches and channels are both 1."""
        return self.batches == 1 and self.channels == 1

    def is_scalar(self) -> bool:
        """True when the shape holds exactly one element."""
        return self.total_size == 1

    def broadcastable_to(self, other: ShapeLike) -> bool:
        """
        True when each of this shape's logical dimensions divides the
        corresponding dimension of ``other``.
        """
        target = as_shape(other)
        for small, big in zip(self.as_4d(), target.as_4d()):
            if small == 0 or big % small != 0:
                return False
        return True


def as_shape(value: ShapeLike) -> Shape:
    """
    Coerce a sequence of ints (or a Shape) into a `Shape` without aliasing.
    """
    if isinstance(value, Shape):
        return value.clone()
    if isinstance(value, int):
        return Shape((value,))
    return Shape(value)


def tensor_shape(value: ShapeLike) -> Shape:
    """
    Validate a shape for tensor storage.

    A one-dimensional shape ``(n,)`` is normalized to the matrix ``(1, n)``.

    Raises
    ------
    ShapeMismatchError
        If the shape is empty.
    DomainError
        If any dimension is smaller than 1.
    """
    shp = as_shape(value)
    if shp.dims == 0:
        raise ShapeMismatchError("Tensor", "at least 1 dim", shp)
    if shp.dims == 1:
        shp = Shape((1, shp[0]))
    for d in shp:
        if d < 1:
            raise DomainError(f"Tensor dimensions must be >= 1, got {shp!r}.")
    return shp
