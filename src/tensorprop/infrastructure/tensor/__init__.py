"""
Tensor public API.

Exports
-------
- Shape:
    Mutable dimension vector with (batches, channels, rows, cols) accessors.
- Tensor:
    Flat float64 NumPy buffer with elementwise, reduction, structural and
    linear-algebra operations.
- TensorIterator:
    Lazy, single-pass iterator over zero-copy sub-tensor views.
- shuffle_pair:
    Synchronized Fisher-Yates shuffle of two datasets along the batch axis.
"""

from ._shape import Shape, as_shape
from ._tensor import Tensor
from ._iterator import TensorIterator
from ._shuffle import shuffle_pair

__all__ = [
    Shape.__name__,
    Tensor.__name__,
    TensorIterator.__name__,
    as_shape.__name__,
    shuffle_pair.__name__,
]
