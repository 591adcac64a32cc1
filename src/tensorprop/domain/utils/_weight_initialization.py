"""
Abstract interfaces and utilities for weight initialization.

This module defines the abstract base class for weight initializers used
throughout the framework, along with shared helper functions for computing
fan-in and fan-out values from parameter shapes.

The concrete implementation and registry logic live in the infrastructure
layer. This module exists in the domain layer to define contracts and shared
mathematical utilities without binding to any specific backend.

Parameter layouts
-----------------
- Dense weights are stored as ``(in_features, units)``.
- Conv2D weights are stored as ``(filters, channels, kernel_rows, kernel_cols)``.
"""

from typing import Callable, Dict, TypeVar
from abc import ABC

from .._tensor import ITensor


T = TypeVar("T", bound=Callable[..., ITensor])


class _WeightInitializer(ABC):
    """
    Abstract base class for weight initializer dispatchers.

    Design notes
    ------------
    - Initializers are identified by string names.
    - Each initializer is a callable that mutates a tensor in-place and
      returns it.
    - This class does not prescribe how initializers are stored or invoked;
      it only defines the expected interface.
    """

    INITIALIZERS: Dict[str, Callable] = {}

    def __init__(self, initializer_name: str) -> None: ...

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Register a weight initializer under a given name.

        Parameters
        ----------
        name:
            Name used to identify the initializer.
        overwrite:
            Whether to allow overwriting an existing registration.

        Returns
        -------
        Callable
            A decorator that registers the initializer function.
        """
        ...

    @classmethod
    def available(cls) -> tuple[str, ...]: ...

    def __call__(self, tensor: ITensor, *args, **kwargs) -> ITensor: ...


def _calculate_fan_in(shape: tuple[int, ...]) -> int:
    """
    Compute the fan-in value for a parameter shape.

    Parameters
    ----------
    shape:
        Shape of the weight tensor.

    Returns
    -------
    int
        The number of input connections feeding one output unit.
    """
    return _calculate_fan_in_and_fan_out(shape)[0]


def _calculate_fan_in_and_fan_out(shape: tuple[int, ...]) -> tuple[int, int]:
    """
    Compute both fan-in and fan-out values for a parameter shape.

    Parameters
    ----------
    shape:
        Shape of the weight tensor.

    Returns
    -------
    tuple[int, int]
        A tuple of (fan_in, fan_out).
    """
    if len(shape) == 0:
        return 1, 1
    if len(shape) == 1:
        return shape[0], shape[0]
    if len(shape) == 2:
        # Dense: (in_features, units)
        fan_in, fan_out = shape
        return int(fan_in), int(fan_out)

    # Conv2D: (filters, channels, k_rows, k_cols)
    receptive_field = 1
    for d in shape[2:]:
        receptive_field *= int(d)

    fan_in = int(shape[1]) * receptive_field
    fan_out = int(shape[0]) * receptive_field
    return fan_in, fan_out
