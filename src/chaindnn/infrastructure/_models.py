"""
Network container and training history.

`Network` is the top-level object users build and train; `History` is what
`Network.fit` returns. Layer variants are imported here so that checkpoints
can always resolve every registered layer kind.
"""

from . import _layers  # noqa: F401  (registers layer kinds)
from .models._history import History
from .models._network import CHECKPOINT_FORMAT, Network

__all__ = [
    Network.__name__,
    History.__name__,
    "CHECKPOINT_FORMAT",
]
