"""
Parameter handles.

A `ParameterArena` hands out one `ParameterHandle` per trainable tensor slot
of a pipeline (e.g. "layer 2 weights"). Handles are small immutable values
that compare and hash by (arena, slot), so optimizers can key per-parameter
state on them without relying on string naming conventions or object ids.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import List

_ARENA_IDS = itertools.count(1)


@dataclass(frozen=True)
class ParameterHandle:
    """
    Opaque identifier of one trainable tensor slot.

    Attributes
    ----------
    arena : int
        Identifier of the arena that issued the handle.
    slot : int
        Position of the parameter inside its arena.
    label : str
        Human-readable name (e.g. ``"layer1_weights"``); not part of equality.
    """

    arena: int
    slot: int
    label: str = field(default="", compare=False)


class ParameterArena:
    """
    Issues consecutive handles for the parameters of one pipeline.
    """

    def __init__(self) -> None:
        self._id = next(_ARENA_IDS)
        self._labels: List[str] = []

    def allocate(self, label: str = "") -> ParameterHandle:
        handle = ParameterHandle(self._id, len(self._labels), label)
        self._labels.append(label)
        return handle

    def labels(self) -> List[str]:
        return list(self._labels)

    def __len__(self) -> int:
        return len(self._labels)
