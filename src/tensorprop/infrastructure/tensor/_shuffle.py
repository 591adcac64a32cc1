"""
Synchronized in-place shuffling of paired datasets.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ._tensor import Tensor
from ...domain._errors import ShapeMismatchError


def shuffle_pair(
    x: Tensor, y: Tensor, rng: Optional[np.random.Generator] = None
) -> None:
    """
    Shuffle the batches of ``x`` and ``y`` in place with one permutation.

    A single Fisher-Yates pass draws one swap partner per position and applies
    the same swap to both tensors, so sample/label pairs stay aligned.

    Raises
    ------
    ShapeMismatchError
        If the tensors hold a different number of batches.
    """
    n = x.shape.batches
    if y.shape.batches != n:
        raise ShapeMismatchError("shuffle_pair batches", n, y.shape.batches)
    gen = rng if rng is not None else np.random.default_rng()

    xs = x._data.reshape(n, -1)
    ys = y._data.reshape(n, -1)
    for i in range(n - 1, 0, -1):
        j = int(gen.integers(0, i + 1))
        if i != j:
            xs[[i, j]] = xs[[j, i]]
            ys[[i, j]] = ys[[j, i]]
