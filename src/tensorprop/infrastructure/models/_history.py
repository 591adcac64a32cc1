"""
Training history utilities.

This module defines the container `Sequential.fit` uses to record per-epoch
metrics. It is deliberately passive: the training loop aggregates and rounds
values, `History` only stores them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union


Number = Union[int, float]


@dataclass
class History:
    """
    Container for per-epoch training metrics.

    Attributes
    ----------
    history : Dict[str, List[float]]
        Mapping from metric name to a list of per-epoch values.
    epoch : List[int]
        Epoch indices (0-based, counted across all `fit` calls) for the
        entries in `history`.
    """

    history: Dict[str, List[float]] = field(default_factory=dict)
    epoch: List[int] = field(default_factory=list)

    @classmethod
    def with_metrics(cls, *names: str) -> "History":
        """Create a history whose metric lists exist (empty) up front."""
        return cls(history={name: [] for name in names})

    def _ensure_key(self, k: str) -> None:
        if k not in self.history:
            self.history[k] = []

    def append_epoch(self, epoch_idx: int, logs: Mapping[str, Number]) -> None:
        """
        Append metrics for a completed epoch.

        Parameters
        ----------
        epoch_idx : int
            Zero-based index of the completed epoch.
        logs : Mapping[str, Number]
            Mapping from metric name to aggregated epoch value.
        """
        self.epoch.append(int(epoch_idx))
        for k, v in logs.items():
            self._ensure_key(k)
            self.history[k].append(float(v))

    def last(self) -> Dict[str, float]:
        """
        Return metrics from the most recent epoch.
        """
        out: Dict[str, float] = {}
        for k, vs in self.history.items():
            if vs:
                out[k] = float(vs[-1])
        return out

    def select(self, *names: str) -> Dict[str, List[float]]:
        """
        Return copies of the requested metric lists (all metrics when no
        names are given). Unknown names map to empty lists.
        """
        keys = names or tuple(self.history)
        return {k: list(self.history.get(k, [])) for k in keys}

    def __getitem__(self, name: str) -> List[float]:
        return self.history[name]

    def to_dict(self) -> Dict[str, Any]:
        return {"history": self.select(), "epoch": list(self.epoch)}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "History":
        hist = cls()
        for k, vs in dict(payload.get("history", {})).items():
            hist.history[str(k)] = [float(v) for v in vs]
        hist.epoch = [int(e) for e in payload.get("epoch", [])]
        return hist
