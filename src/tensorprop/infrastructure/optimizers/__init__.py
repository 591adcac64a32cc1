"""
Optimizer public API and registry.

Exports
-------
- SGD, Adam:
    Concrete optimizers implementing ``initialize()`` / ``apply(handle, param, grad)``.
- ParameterHandle, ParameterArena:
    Identifiers used to key per-parameter optimizer state.
- Optimizers, get_optimizer:
    Registry resolving string tags (``"sgd"``, ``"adam"``) to fresh instances.
"""

from typing import Callable, Dict, Union

from ...domain._errors import ConfigurationError
from ...domain._optimizers import IOptimizer
from ._adam import Adam
from ._sgd import SGD
from ._handles import ParameterArena, ParameterHandle

Optimizers: Dict[str, Callable[[], IOptimizer]] = {
    "sgd": SGD,
    "adam": Adam,
}


def get_optimizer(optimizer: Union[str, IOptimizer]) -> IOptimizer:
    """
    Resolve an optimizer from a registry tag, or pass an instance through.

    Raises
    ------
    ConfigurationError
        If the tag is unknown or the object is not an optimizer.
    """
    if not isinstance(optimizer, str):
        if isinstance(optimizer, IOptimizer):
            return optimizer
        raise ConfigurationError(f"Cannot use {optimizer!r} as an optimizer.")
    try:
        return Optimizers[optimizer.lower()]()
    except KeyError as e:
        available = ", ".join(sorted(Optimizers))
        raise ConfigurationError(
            f"Unknown optimizer {optimizer!r}. Available: {available}"
        ) from e


__all__ = [
    SGD.__name__,
    Adam.__name__,
    ParameterArena.__name__,
    ParameterHandle.__name__,
    get_optimizer.__name__,
    "Optimizers",
]
