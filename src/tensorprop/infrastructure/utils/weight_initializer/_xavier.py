"""
Xavier/Glorot weight initializers.

Implemented variants
--------------------
- ``xavier``:
    Xavier normal initialization using ``std = sqrt(2 / (fan_in + fan_out))``.
- ``xavier_uniform``:
    Xavier uniform initialization using
    ``U(-sqrt(6/(fan_in+fan_out)), +sqrt(6/(fan_in+fan_out)))``.

Notes
-----
- Fan-in and fan-out are computed from the weight tensor shape via
  ``_calculate_fan_in_and_fan_out``.
- Initializers mutate the provided tensor in-place and return it.
"""

import math

import numpy as np

from ._base import WeightInitializer
from ...tensor._tensor import Tensor
from ....domain.utils._weight_initialization import _calculate_fan_in_and_fan_out


@WeightInitializer.register_initializer("xavier")
def xavier(tensor: Tensor) -> Tensor:
    """
    Apply Xavier (Glorot) normal initialization.

        std = sqrt(2 / (fan_in + fan_out))

    Parameters
    ----------
    tensor:
        The tensor to initialize in-place.

    Returns
    -------
    Tensor
        The initialized tensor (same object).
    """
    fan_in, fan_out = _calculate_fan_in_and_fan_out(tensor.shape.as_tuple())
    denom = max(1, int(fan_in) + int(fan_out))

    std = math.sqrt(2.0 / float(denom))

    w = np.random.randn(tensor.size) * std
    tensor.copy_from_numpy(w)
    return tensor


@WeightInitializer.register_initializer("xavier_uniform")
def xavier_uniform(tensor: Tensor) -> Tensor:
    """
    Apply Xavier (Glorot) uniform initialization.

        limit = sqrt(6 / (fan_in + fan_out))
    """
    fan_in, fan_out = _calculate_fan_in_and_fan_out(tensor.shape.as_tuple())
    denom = max(1, int(fan_in) + int(fan_out))
    limit = math.sqrt(6.0 / float(denom))

    w = np.random.uniform(-limit, limit, size=tensor.size)
    tensor.copy_from_numpy(w)
    return tensor
