"""
Training history.

`History` is the record returned by `Network.fit`: one aggregated value per
metric per completed epoch. It knows nothing about layers, tensors or
optimizers; the training loop hands it already-averaged numbers.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Union


Number = Union[int, float]


@dataclass
class History:
    """
    Per-epoch metric record.

    Attributes
    ----------
    history : Dict[str, List[float]]
        Metric name -> values, one per epoch, in epoch order.
    epoch : List[int]
        Zero-based epoch indices, aligned with every list in `history`.
    """

    history: Dict[str, List[float]] = field(default_factory=dict)
    epoch: List[int] = field(default_factory=list)

    def append_epoch(self, epoch_idx: int, logs: Mapping[str, Number]) -> None:
        """
        Record the aggregated logs of one finished epoch.

        Values are stored as Python floats.
        """
        self.epoch.append(int(epoch_idx))
        for k, v in logs.items():
            self.history.setdefault(k, []).append(float(v))

    def last(self) -> Dict[str, float]:
        """
        Latest value of every metric that has one.
        """
        return {k: float(vs[-1]) for k, vs in self.history.items() if vs}

    def __len__(self) -> int:
        return len(self.epoch)
