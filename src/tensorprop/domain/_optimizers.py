"""
Domain-level optimizer contracts for tensorprop.

This module defines the `IOptimizer` protocol, which specifies the minimal
interface required for optimizer implementations (e.g., SGD, Adam).

Notes
-----
- Domain contracts are backend-agnostic and must not depend on NumPy or
  infrastructure implementations.
- Optimizers do not discover parameters themselves. The training pipeline
  hands each (parameter, gradient) pair to `apply` together with an opaque,
  hashable handle that identifies the parameter slot. Per-parameter state
  (e.g. Adam moments) is keyed by that handle.
"""

from __future__ import annotations

from typing import Hashable, Optional, Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    Required methods
    ----------------
    - `initialize()` fills in default hyperparameters, validates them and
      resets per-parameter state.
    - `apply(handle, param, grad)` updates ``param`` in place. A ``None``
      parameter or gradient is a no-op.
    """

    def initialize(self) -> None: ...

    def apply(
        self,
        handle: Hashable,
        param: Optional[ITensor],
        grad: Optional[ITensor],
    ) -> None: ...
