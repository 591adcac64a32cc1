"""
Weight initializer registry and dispatch utilities.

This module defines the concrete `WeightInitializer` used by the layers to
apply registered weight initialization strategies (Kaiming, Xavier, constants)
to `Tensor` parameters.

Design
------
- Initializers are registered by string name via a decorator-based registry.
- Each initializer is a callable that mutates a tensor *in-place* and returns it.
- The dispatcher resolves an initializer by name at construction time and
  invokes it via `__call__`.

Usage example
-------------
Registering an initializer:

    @WeightInitializer.register_initializer("kaiming")
    def kaiming(tensor: Tensor) -> Tensor:
        ...

Applying an initializer:

    init = WeightInitializer("kaiming")
    init(weight_tensor)
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, TypeVar

from ....domain.utils._weight_initialization import _WeightInitializer
from ....domain._errors import ConfigurationError
from ...tensor._tensor import Tensor

T = TypeVar("T", bound=Callable[..., Tensor])


class WeightInitializer(_WeightInitializer):
    """
    Registry-backed weight initializer dispatcher.

    Notes
    -----
    - Initializers are stored by string name in a class-level registry.
    - The initializer callable should mutate `tensor` in-place and return it.
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[..., Tensor]]] = {}

    def __init__(self, initializer_name: str) -> None:
        try:
            self._initializer: Callable[..., Tensor] = self.INITIALIZERS[
                initializer_name
            ]
        except KeyError as e:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise ConfigurationError(
                f"Unsupported initializer name: {initializer_name!r}. "
                f"Available: {available}"
            ) from e
        self.name = initializer_name

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Decorator to register a weight initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ConfigurationError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ConfigurationError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    @classmethod
    def for_activation(cls, rectifying: bool) -> "WeightInitializer":
        """
        He initialization for ReLU-family activations, Xavier otherwise.
        """
        return cls("kaiming" if rectifying else "xavier")

    def __call__(self, tensor: Tensor, *args: Any, **kwargs: Any) -> Tensor:
        return self._initializer(tensor, *args, **kwargs)
