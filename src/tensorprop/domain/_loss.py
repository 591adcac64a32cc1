"""
Loss function contracts.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class ILoss(Protocol):
    """
    Loss interface.

    All three methods require ``y_true`` and ``y_pred`` to have equal
    (training-equal) shapes.

    Methods
    -------
    calc_loss(y_true, y_pred) -> float
        Scalar loss averaged over the batch.
    accuracy(y_true, y_pred) -> float
        Fraction of correct predictions in ``[0, 1]``.
    gradient(y_true, y_pred) -> ITensor
        Gradient of the loss w.r.t. ``y_pred``, shaped like ``y_pred``.
    """

    kind: str

    def calc_loss(self, y_true: ITensor, y_pred: ITensor) -> float: ...

    def accuracy(self, y_true: ITensor, y_pred: ITensor) -> float: ...

    def gradient(self, y_true: ITensor, y_pred: ITensor) -> ITensor: ...
