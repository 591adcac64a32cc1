"""
Loss functions for tensorprop.

This module implements the regression and classification losses used by the
`Sequential` training loop. Each loss exposes three operations on a pair of
training-equal tensors ``(y_true, y_pred)``:

- `calc_loss`  : scalar loss averaged over the batch,
- `accuracy`   : fraction of correct predictions in ``[0, 1]``,
- `gradient`   : d(loss)/d(y_pred), shaped like ``y_pred``.

Implemented losses
------------------
- MeanSquaredError          (``mse``)
- BinaryCrossEntropy        (``binary_crossentropy``, ``bce``)
- CategoricalCrossEntropy   (``categorical_crossentropy``, ``cce``)

Design notes
------------
- Gradients are scaled consistently with the reported (mean) loss.
- Cross-entropy losses clip probabilities into ``[EPSILON, 1 - EPSILON]``
  before taking logarithms.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Dict, Type, Union

import numpy as np

from ..domain._errors import ConfigurationError, ShapeMismatchError
from ..domain._loss import ILoss
from .tensor._tensor import Tensor

EPSILON = 1e-15


def _clip(t: Tensor) -> Tensor:
    return t.map(lambda v: np.clip(v, EPSILON, 1.0 - EPSILON))


def _samples(t: Tensor) -> int:
    """Number of rows (samples) when the tensor is read as (size/cols, cols)."""
    return max(1, t.size // t.shape.cols)


class Loss(ABC):
    """
    Base class for losses.
    """

    kind: ClassVar[str] = ""

    @staticmethod
    def _check(y_true: Tensor, y_pred: Tensor, op: str) -> None:
        if not y_true.shape.eq(y_pred.shape):
            raise ShapeMismatchError(op, y_pred.shape, y_true.shape)

    @abstractmethod
    def calc_loss(self, y_true: Tensor, y_pred: Tensor) -> float: ...

    @abstractmethod
    def accuracy(self, y_true: Tensor, y_pred: Tensor) -> float: ...

    @abstractmethod
    def gradient(self, y_true: Tensor, y_pred: Tensor) -> Tensor: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class MeanSquaredError(Loss):
    """
    Mean squared error.

        MSE  = mean((y_true - y_pred)^2)
        dMSE = 2 / N * (y_pred - y_true)

    Accuracy counts predictions that equal the target after rounding to the
    nearest integer.
    """

    kind = "mse"

    def calc_loss(self, y_true: Tensor, y_pred: Tensor) -> float:
        self._check(y_true, y_pred, "mse")
        diff = y_true.subtract(y_pred)
        return diff.multiply(diff, in_place=True).avg()

    def accuracy(self, y_true: Tensor, y_pred: Tensor) -> float:
        self._check(y_true, y_pred, "mse accuracy")
        hits = y_pred.map_batch(lambda o: np.round(o[0]) == np.round(o[1]), y_true)
        return hits.avg()

    def gradient(self, y_true: Tensor, y_pred: Tensor) -> Tensor:
        self._check(y_true, y_pred, "mse gradient")
        return y_pred.subtract(y_true).scalar_multiply(2.0 / y_pred.size, in_place=True)


class BinaryCrossEntropy(Loss):
    """
    Binary cross-entropy on probabilities.

        BCE  = -mean(y * log(p) + (1 - y) * log(1 - p))
        dBCE = (-(y / p) + (1 - y) / (1 - p)) / N

    Accuracy compares rounded probabilities with the targets.
    """

    kind = "binary_crossentropy"

    def calc_loss(self, y_true: Tensor, y_pred: Tensor) -> float:
        self._check(y_true, y_pred, "binary_crossentropy")
        p = _clip(y_pred)
        terms = y_true.map_batch(
            lambda o: o[0] * np.log(o[1]) + (1.0 - o[0]) * np.log(1.0 - o[1]), p
        )
        return -terms.avg()

    def accuracy(self, y_true: Tensor, y_pred: Tensor) -> float:
        self._check(y_true, y_pred, "binary_crossentropy accuracy")
        hits = y_true.map_batch(lambda o: o[0] == np.round(o[1]), y_pred)
        return hits.avg()

    def gradient(self, y_true: Tensor, y_pred: Tensor) -> Tensor:
        self._check(y_true, y_pred, "binary_crossentropy gradient")
        p = _clip(y_pred)
        n = float(y_pred.size)
        return y_true.map_batch(
            lambda o: (-(o[0] / o[1]) + (1.0 - o[0]) / (1.0 - o[1])) / n, p
        )


class CategoricalCrossEntropy(Loss):
    """
    Categorical cross-entropy on probability rows with one-hot targets.

        CCE  = -sum(y * log(p)) / rows
        dCCE = -(y / p) / rows

    Accuracy compares the arg-max of each prediction row with the arg-max of
    the target row.
    """

    kind = "categorical_crossentropy"

    def calc_loss(self, y_true: Tensor, y_pred: Tensor) -> float:
        self._check(y_true, y_pred, "categorical_crossentropy")
        p = _clip(y_pred)
        terms = y_true.map_batch(lambda o: o[0] * np.log(o[1]), p)
        return -terms.sum() / _samples(y_pred)

    def accuracy(self, y_true: Tensor, y_pred: Tensor) -> float:
        self._check(y_true, y_pred, "categorical_crossentropy accuracy")
        truth = y_true.arg_max(1)
        guess = y_pred.arg_max(1)
        hits = sum(1 for t, g in zip(truth, guess) if t == g)
        return hits / len(truth)

    def gradient(self, y_true: Tensor, y_pred: Tensor) -> Tensor:
        self._check(y_true, y_pred, "categorical_crossentropy gradient")
        p = _clip(y_pred)
        rows = float(_samples(y_pred))
        return y_true.map_batch(lambda o: -(o[0] / o[1]) / rows, p)


Losses: Dict[str, Type[Loss]] = {
    "mse": MeanSquaredError,
    "mean_squared_error": MeanSquaredError,
    "binary_crossentropy": BinaryCrossEntropy,
    "bce": BinaryCrossEntropy,
    "categorical_crossentropy": CategoricalCrossEntropy,
    "cce": CategoricalCrossEntropy,
}


def get_loss(loss: Union[str, ILoss]) -> ILoss:
    """
    Resolve a loss from a registry tag, or pass an instance through.

    Raises
    ------
    ConfigurationError
        If the tag is unknown.
    """
    if not isinstance(loss, str):
        if isinstance(loss, ILoss):
            return loss
        raise ConfigurationError(f"Cannot use {loss!r} as a loss.")
    try:
        return Losses[loss.lower()]()
    except KeyError as e:
        available = ", ".join(sorted(Losses))
        raise ConfigurationError(f"Unknown loss {loss!r}. Available: {available}") from e
