"""
Window geometry helpers shared by convolution and pooling layers.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import List, Sequence, Tuple, Union

from ...domain._errors import ConfigurationError, DomainError
from ..tensor._shape import ShapeLike, as_shape

IntPair = Union[int, Sequence[int]]


class PaddingMode(str, Enum):
    """
    ``valid``: no padding; windows must fit inside the input.
    ``full``: pad so the output extent is ``ceil(n / stride)`` per axis.
    """

    VALID = "valid"
    FULL = "full"

    @classmethod
    def parse(cls, value: Union[str, "PaddingMode"]) -> "PaddingMode":
        if isinstance(value, PaddingMode):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown padding mode {value!r}; expected 'valid' or 'full'."
            ) from e


def to_pair(value: IntPair, name: str, default: Tuple[int, int] = (1, 1)) -> Tuple[int, int]:
    """
    Normalize a kernel/stride argument to a validated ``(rows, cols)`` pair.

    ``(0, 0)`` selects ``default``. Any other non-positive entry is rejected.

    Raises
    ------
    DomainError
        If the pair is malformed or has a non-positive entry.
    """
    if isinstance(value, int):
        pair = (value, value)
    else:
        items = tuple(int(v) for v in value)
        if len(items) != 2:
            raise DomainError(f"{name} must have 2 entries, got {items}.")
        pair = (items[0], items[1])
    if pair == (0, 0):
        return default
    if pair[0] < 1 or pair[1] < 1:
        raise DomainError(f"{name} entries must be >= 1, got {pair}.")
    return pair


def _axis_padding(n: int, k: int, s: int) -> Tuple[int, int]:
    total = max((math.ceil(n / s) - 1) * s + k - n, 0)
    before = total // 2
    return before, total - before


def compute_padding(
    input_shape: ShapeLike,
    kernel_size: Tuple[int, int],
    strides: Tuple[int, int],
    mode: Union[str, PaddingMode],
) -> List[int]:
    """
    Compute ``[top, right, bottom, left]`` padding for a sliding window.

    ``valid`` yields zeros. ``full`` pads each axis by
    ``max((ceil(n/s) - 1)*s + k - n, 0)`` in total, putting the smaller half
    on the top/left side, so the window count per axis is ``ceil(n / s)``.
    """
    shape = as_shape(input_shape)
    if PaddingMode.parse(mode) is PaddingMode.VALID:
        return [0, 0, 0, 0]
    top, bottom = _axis_padding(shape.rows, kernel_size[0], strides[0])
    left, right = _axis_padding(shape.cols, kernel_size[1], strides[1])
    return [top, right, bottom, left]


def output_extent(n: int, pad_before: int, pad_after: int, k: int, s: int) -> int:
    """Number of window positions along one padded axis."""
    return (n + pad_before + pad_after - k) // s + 1
