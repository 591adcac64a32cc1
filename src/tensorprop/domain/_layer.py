"""
Layer interface definitions.

This module defines the domain-level interface for network layers using
structural subtyping via `typing.Protocol`.

A layer moves through a small state machine:

    Uncompiled --compile_layer--> Compiled --forward--> Forwarded
    Forwarded --backward--> Forwarded (parameter gradients populated)

Calling `backward` before any `forward` is a precondition violation.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence, runtime_checkable

from ._tensor import IShape, ITensor


@runtime_checkable
class ILayer(Protocol):
    """
    Domain-level layer interface.

    Parameterless layers (input, flatten, pooling) report ``None`` for all
    four parameter accessors. Trainable layers populate the gradient
    accessors during `backward`.
    """

    @property
    def layer_type(self) -> str:
        """
        Registry tag used when persisting the layer.
        """
        ...

    def compile_layer(self, input_shape: Sequence[int] | IShape) -> IShape:
        """
        Infer the output shape and allocate parameters.

        Parameters
        ----------
        input_shape : Sequence[int] | IShape
            Per-sample shape produced by the previous layer.

        Returns
        -------
        IShape
            Per-sample output shape of this layer.
        """
        ...

    def forward(self, x: ITensor) -> ITensor:
        """
        Execute the forward computation and cache what `backward` needs.
        """
        ...

    def backward(self, gradient: ITensor) -> ITensor:
        """
        Propagate the gradient of the loss w.r.t. this layer's output.

        Returns
        -------
        ITensor
            Gradient w.r.t. this layer's input, shaped like that input.
        """
        ...

    @property
    def weights(self) -> Optional[ITensor]: ...

    @property
    def biases(self) -> Optional[ITensor]: ...

    @property
    def weights_gradient(self) -> Optional[ITensor]: ...

    @property
    def biases_gradient(self) -> Optional[ITensor]: ...

    def get_config(self) -> Dict[str, Any]: ...
