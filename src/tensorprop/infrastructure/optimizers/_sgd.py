"""
Stochastic Gradient Descent (SGD) optimizer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional

from ...domain._errors import DomainError, PreconditionError
from ..tensor._tensor import Tensor

DEFAULT_LR = 0.01


@dataclass
class SGD:
    """
    Plain stochastic gradient descent.

    Update rule
    -----------
        p <- p - lr * (g + weight_decay * p)

    Parameters
    ----------
    lr : float, optional
        Learning rate. ``None`` selects the default (0.01) at `initialize`.
    weight_decay : float, optional
        Classical L2 regularization coefficient. Must be >= 0.

    Notes
    -----
    SGD keeps no per-parameter state; the handle passed to `apply` is
    accepted for interface compatibility only.
    """

    lr: Optional[float] = None
    weight_decay: float = 0.0

    def initialize(self) -> None:
        """
        Fill in the default learning rate and validate hyperparameters.

        Raises
        ------
        DomainError
            If ``lr <= 0`` or ``weight_decay < 0``.
        """
        if self.lr is None:
            self.lr = DEFAULT_LR
        self.lr = float(self.lr)
        self.weight_decay = float(self.weight_decay)
        if self.lr <= 0.0:
            raise DomainError(f"lr must be > 0, got {self.lr}")
        if self.weight_decay < 0.0:
            raise DomainError(f"weight_decay must be >= 0, got {self.weight_decay}")

    def apply(
        self, handle: Hashable, param: Optional[Tensor], grad: Optional[Tensor]
    ) -> None:
        """
        Update ``param`` in place from ``grad``; ``None`` inputs are skipped.
        """
        if param is None or grad is None:
            return
        if self.lr is None:
            raise PreconditionError("SGD.apply called before initialize().")
        step = grad if self.weight_decay == 0.0 else grad.add(
            param.scalar_multiply(self.weight_decay)
        )
        param.subtract(step.scalar_multiply(self.lr), in_place=True)
