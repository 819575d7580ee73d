"""
Layer variants for ChainDNN.

Convenience import location for the layer base class and the closed set of
concrete layers. Importing this module also guarantees every variant is
registered for checkpoint loading.
"""

from ._layer import Layer
from .layers._dense import Dense
from .layers._relu import Relu
from .layers._softmax import Softmax, softmax

__all__ = [
    Layer.__name__,
    Dense.__name__,
    Relu.__name__,
    Softmax.__name__,
    softmax.__name__,
]
