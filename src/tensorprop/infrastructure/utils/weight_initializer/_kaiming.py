"""
Kaiming (He) weight initializers.

Implemented variants
--------------------
- ``kaiming``:
    Normal initialization with ``std = sqrt(2 / fan_in)``.
- ``kaiming_uniform``:
    Uniform initialization on ``U(-sqrt(6/fan_in), +sqrt(6/fan_in))``.

Notes
-----
- Fan-in is computed from the weight tensor shape via ``_calculate_fan_in``.
- All initializers mutate the provided tensor in-place and return it.
- Randomness comes from NumPy's global generator; seed it with
  ``np.random.seed`` for reproducible runs.
"""

import math

import numpy as np

from ._base import WeightInitializer
from ...tensor._tensor import Tensor
from ....domain.utils._weight_initialization import _calculate_fan_in


@WeightInitializer.register_initializer("kaiming")
def kaiming(tensor: Tensor) -> Tensor:
    """
    Apply standard Kaiming (He) normal initialization.

        std = sqrt(2 / fan_in)

    Parameters
    ----------
    tensor:
        The tensor to initialize in-place.

    Returns
    -------
    Tensor
        The initialized tensor (same object).
    """
    fan_in = _calculate_fan_in(tensor.shape.as_tuple())
    fan_in = max(1, int(fan_in))

    scale = math.sqrt(2.0 / float(fan_in))

    w = np.random.randn(tensor.size) * scale
    tensor.copy_from_numpy(w)
    return tensor


@WeightInitializer.register_initializer("kaiming_uniform")
def kaiming_uniform(tensor: Tensor) -> Tensor:
    """
    Apply Kaiming (He) uniform initialization.

        limit = sqrt(6 / fan_in)
    """
    fan_in = max(1, int(_calculate_fan_in(tensor.shape.as_tuple())))
    limit = math.sqrt(6.0 / float(fan_in))

    w = np.random.uniform(-limit, limit, size=tensor.size)
    tensor.copy_from_numpy(w)
    return tensor
