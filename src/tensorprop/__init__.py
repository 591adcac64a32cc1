"""
tensorprop: a rank-4 tensor engine with manual backpropagation.

Importing the package registers every built-in layer, activation, loss,
optimizer and weight initializer, so persisted models can be rebuilt by tag.
"""

from .domain._errors import (
    ConfigurationError,
    DomainError,
    PreconditionError,
    ShapeMismatchError,
    TensorPropError,
)
from .infrastructure.tensor import Shape, Tensor, TensorIterator, shuffle_pair
from .infrastructure._activations import (
    Activation,
    Activations,
    Linear,
    ReLU,
    Sigmoid,
    Softmax,
    get_activation,
)
from .infrastructure._losses import (
    BinaryCrossEntropy,
    CategoricalCrossEntropy,
    Loss,
    Losses,
    MeanSquaredError,
    get_loss,
)
from .infrastructure.optimizers import (
    SGD,
    Adam,
    Optimizers,
    ParameterArena,
    ParameterHandle,
    get_optimizer,
)
from .infrastructure._layer import Layer
from .infrastructure.module._serialization_core import register_layer
from .infrastructure.layers._input import Input
from .infrastructure.fully_connected._dense import Dense
from .infrastructure.convolution._conv2d_module import Conv2D
from .infrastructure.convolution._padding import PaddingMode, compute_padding
from .infrastructure.pooling._pooling_module import Pooling, PoolingType
from .infrastructure.flatten._flatten_module import Flatten
from .infrastructure.models._history import History
from .infrastructure.models._sequential import Sequential
from .infrastructure.data._csv import load_csv
from .infrastructure.utils.weight_initializer import WeightInitializer

__version__ = "0.1.0a0"

__all__ = [
    "TensorPropError",
    "ShapeMismatchError",
    "DomainError",
    "PreconditionError",
    "ConfigurationError",
    "Shape",
    "Tensor",
    "TensorIterator",
    "shuffle_pair",
    "Activation",
    "Activations",
    "ReLU",
    "Sigmoid",
    "Softmax",
    "Linear",
    "get_activation",
    "Loss",
    "Losses",
    "MeanSquaredError",
    "BinaryCrossEntropy",
    "CategoricalCrossEntropy",
    "get_loss",
    "SGD",
    "Adam",
    "Optimizers",
    "ParameterArena",
    "ParameterHandle",
    "get_optimizer",
    "Layer",
    "register_layer",
    "Input",
    "Dense",
    "Conv2D",
    "PaddingMode",
    "compute_padding",
    "Pooling",
    "PoolingType",
    "Flatten",
    "History",
    "Sequential",
    "load_csv",
    "WeightInitializer",
]
