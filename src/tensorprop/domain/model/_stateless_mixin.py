"""
Parameterless layer mixin.

This module defines `StatelessConfigMixin`, a helper mixin for layers that own
no trainable parameters and whose behavior does not depend on configurable
hyperparameters (e.g. `Flatten`).

It provides empty parameter accessors plus no-op configuration hooks, so
parameterless layers participate uniformly in optimizer dispatch and model
persistence without special cases in the pipeline.
"""

from typing import Any, Dict, Optional, Sequence
from typing_extensions import Self

from .._tensor import ITensor


class StatelessConfigMixin:
    """
    Mixin providing parameter and configuration hooks for stateless layers.
    """

    @property
    def weights(self) -> Optional[ITensor]:
        return None

    @property
    def biases(self) -> Optional[ITensor]:
        return None

    @property
    def weights_gradient(self) -> Optional[ITensor]:
        return None

    @property
    def biases_gradient(self) -> Optional[ITensor]:
        return None

    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable configuration dictionary.

        For stateless layers, this method returns an empty dictionary,
        indicating that no parameters are required to reconstruct the object.

        Returns
        -------
        Dict[str, Any]
            An empty configuration dictionary.
        """
        return {}

    @classmethod
    def from_config(
        cls,
        cfg: Dict[str, Any],
        weights: Optional[Sequence[float]] = None,
        biases: Optional[Sequence[float]] = None,
    ) -> Self:
        """
        Reconstruct the layer from a configuration dictionary.

        Since stateless layers do not require any configuration parameters,
        the provided configuration and parameter lists are ignored and a
        default instance of the class is returned.

        Returns
        -------
        StatelessConfigMixin
            A newly constructed instance of the layer.
        """
        return cls()
