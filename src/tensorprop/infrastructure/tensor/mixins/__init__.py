"""
Operation mixins composed into `Tensor`.

Each mixin groups one family of operations and relies on the storage helpers
defined by the concrete `Tensor` (``_data``, ``_shape``, ``_emit``, ``_wrap``).
"""

from ._elementwise import TensorMixinElementwise
from ._reduction import TensorMixinReduction
from ._structural import TensorMixinStructural
from ._linalg import TensorMixinLinalg

__all__ = [
    TensorMixinElementwise.__name__,
    TensorMixinReduction.__name__,
    TensorMixinStructural.__name__,
    TensorMixinLinalg.__name__,
]
