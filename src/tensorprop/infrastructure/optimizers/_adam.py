"""
Adam optimizer implementation.

This module provides the Adam optimization algorithm for tensorprop. The
optimizer updates parameter tensors in-place from the gradients the training
loop hands it, and keeps per-parameter state (step count, first and second
moments) keyed by the parameter's handle.

Design notes
------------
- `apply` receives ``(handle, param, grad)``; a ``None`` parameter or gradient
  is skipped so parameterless layers need no special case.
- Each handle advances its own step counter, so bias correction is exact for
  every parameter regardless of how many parameters the model has.
- Optimizer math is expressed in terms of `Tensor` operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Hashable, Optional

import numpy as np

from ...domain._errors import DomainError, PreconditionError, ShapeMismatchError
from ..tensor._tensor import Tensor

DEFAULT_LR = 1e-3
DEFAULT_BETA1 = 0.9
DEFAULT_BETA2 = 0.999
DEFAULT_EPSILON = 1e-7


@dataclass
class _MomentState:
    t: int
    m: Tensor
    v: Tensor


@dataclass
class Adam:
    """
    Adam optimizer.

    Adam maintains exponentially decaying averages of past gradients (first
    moment) and past squared gradients (second moment), and applies bias
    correction to both estimates.

    Update rule
    -----------
    Let ``g_t`` be the gradient at step ``t``:

        m_t = beta1 * m_{t-1} + (1 - beta1) * g_t
        v_t = beta2 * v_{t-1} + (1 - beta2) * (g_t ** 2)

        m_hat = m_t / (1 - beta1^t)
        v_hat = v_t / (1 - beta2^t)

        p <- p - lr * m_hat / (sqrt(v_hat) + eps)

    Parameters
    ----------
    lr : float, optional
        Learning rate. ``None`` selects 1e-3 at `initialize`.
    beta1, beta2 : float, optional
        Moment decay rates in ``[0, 1)``. ``None`` selects 0.9 / 0.999.
    epsilon : float, optional
        Denominator stabilizer. ``None`` selects 1e-7. An explicit 0 is
        accepted; a zero denominator then raises `DomainError` at `apply`.
    weight_decay : float, optional
        Classical L2 regularization coefficient (coupled). Must be >= 0.
    """

    lr: Optional[float] = None
    beta1: Optional[float] = None
    beta2: Optional[float] = None
    epsilon: Optional[float] = None
    weight_decay: float = 0.0
    _state: Dict[Hashable, _MomentState] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )
    _initialized: bool = field(default=False, init=False, repr=False, compare=False)

    def initialize(self) -> None:
        """
        Fill in default hyperparameters, validate them and reset all state.

        Raises
        ------
        DomainError
            If a hyperparameter is outside its valid range.
        """
        self.lr = float(DEFAULT_LR if self.lr is None else self.lr)
        self.beta1 = float(DEFAULT_BETA1 if self.beta1 is None else self.beta1)
        self.beta2 = float(DEFAULT_BETA2 if self.beta2 is None else self.beta2)
        self.epsilon = float(DEFAULT_EPSILON if self.epsilon is None else self.epsilon)
        self.weight_decay = float(self.weight_decay)

        if self.lr <= 0.0:
            raise DomainError(f"lr must be > 0, got {self.lr}")
        if not (0.0 <= self.beta1 < 1.0) or not (0.0 <= self.beta2 < 1.0):
            raise DomainError(f"betas must be in [0,1), got {(self.beta1, self.beta2)}")
        if self.epsilon < 0.0:
            raise DomainError(f"epsilon must be >= 0, got {self.epsilon}")
        if self.weight_decay < 0.0:
            raise DomainError(f"weight_decay must be >= 0, got {self.weight_decay}")

        self._state = {}
        self._initialized = True

    def state_for(self, handle: Hashable) -> Optional[_MomentState]:
        """Return the moment state recorded for ``handle`` (None before its first update)."""
        return self._state.get(handle)

    def apply(
        self, handle: Hashable, param: Optional[Tensor], grad: Optional[Tensor]
    ) -> None:
        """
        Apply one Adam update to ``param`` in place.

        Raises
        ------
        PreconditionError
            If `initialize` has not been called.
        ShapeMismatchError
            If ``grad`` (or the stored moments) do not match ``param``.
        DomainError
            If a denominator ``sqrt(v_hat) + epsilon`` is zero.
        """
        if param is None or grad is None:
            return
        if not self._initialized:
            raise PreconditionError("Adam.apply called before initialize().")
        if not param.shape.eq(grad.shape):
            raise ShapeMismatchError("adam", param.shape, grad.shape)

        st = self._state.get(handle)
        if st is None:
            st = _MomentState(
                t=0, m=Tensor.zeros(param.shape.clone()), v=Tensor.zeros(param.shape.clone())
            )
            self._state[handle] = st
        elif not st.m.shape.eq(param.shape):
            raise ShapeMismatchError("adam state", st.m.shape, param.shape)

        b1, b2 = self.beta1, self.beta2
        g = grad if self.weight_decay == 0.0 else grad.add(
            param.scalar_multiply(self.weight_decay)
        )

        st.t += 1
        st.m.map_batch(lambda o: b1 * o[0] + (1.0 - b1) * o[1], g, in_place=True)
        st.v.map_batch(lambda o: b2 * o[0] + (1.0 - b2) * o[1] * o[1], g, in_place=True)

        m_hat = st.m.scalar_divide(1.0 - b1**st.t)
        v_hat = st.v.scalar_divide(1.0 - b2**st.t)
        denom = v_hat.map(np.sqrt, in_place=True).scalar_add(self.epsilon, in_place=True)

        step = m_hat.divide(denom, in_place=True)
        param.subtract(step.scalar_multiply(self.lr, in_place=True), in_place=True)
