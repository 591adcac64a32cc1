"""
Activation function contracts.

Activations are stateful per layer instance: `forward` caches whatever the
derivative needs (a private copy), and `backward` consumes that cache to map
the upstream gradient onto the pre-activation values.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class IActivation(Protocol):
    """
    Activation interface.

    Attributes
    ----------
    kind : str
        Registry tag of the activation (e.g. ``"relu"``).
    rectifying : bool
        Whether the activation belongs to the ReLU family; layers use He
        initialization when it does and Xavier otherwise.
    """

    kind: str
    rectifying: bool

    def forward(self, x: ITensor) -> ITensor: ...

    def backward(self, gradient: ITensor) -> ITensor: ...
