"""
Neural-network building blocks on top of the tape.

Provides:
1. View: row-major shape/stride addressing of flat node lists
2. FullyConnectedLayer / MultiLayerPerceptron: graph builders
3. Serialization of layer parameters (little-endian u64/f64 stream)
4. MinibatchSGD: gradient-descent training over a fixed graph
"""

from .view import View
from .layers import input_layer, FullyConnectedLayer, MultiLayerPerceptron
from .serialization import (
    serialize_layer, deserialize_layer,
    serialize_mlp, deserialize_mlp,
    dumps, loads,
)
from .training import TrainingConfig, MinibatchSGD

__all__ = [
    'View',
    'input_layer', 'FullyConnectedLayer', 'MultiLayerPerceptron',
    'serialize_layer', 'deserialize_layer', 'serialize_mlp', 'deserialize_mlp',
    'dumps', 'loads',
    'TrainingConfig', 'MinibatchSGD',
]
