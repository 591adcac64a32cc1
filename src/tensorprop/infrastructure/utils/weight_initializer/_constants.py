"""
Constant weight initializers.

Provided initializers
---------------------
- ``zeros``:
    Initialize a tensor with all elements set to zero.
- ``ones``:
    Initialize a tensor with all elements set to one.

These are used for bias parameters, testing and deterministic model setups.
"""

from ._base import WeightInitializer
from ...tensor._tensor import Tensor


@WeightInitializer.register_initializer("zeros")
def zeros(tensor: Tensor) -> Tensor:
    """
    Initialize a tensor with all elements set to zero (in place).
    """
    return tensor.map(lambda v: 0.0, in_place=True)


@WeightInitializer.register_initializer("ones")
def ones(tensor: Tensor) -> Tensor:
    """
    Initialize a tensor with all elements set to one (in place).
    """
    return tensor.map(lambda v: 1.0, in_place=True)
