"""
Weight initialization public API.

This module aggregates all supported weight initialization strategies,
including Xavier (Glorot), Kaiming (He) and constant initializers, and
registers them into the global `WeightInitializer` registry via import
side effects.

Exports
-------
- WeightInitializer:
    The registry-backed initializer dispatcher used to apply a selected
    initialization strategy to tensors.
"""

from ._xavier import *
from ._kaiming import *
from ._constants import *
from ._base import WeightInitializer

__all__ = [
    WeightInitializer.__name__,
]
