# tapegrad/nn/layers.py
"""
Layer builders: insert parameterised sub-graphs (weights, biases, affine
combination, optional activation) into an `Operations` tape.

Builders only insert ordinary nodes; every derivative comes from the
operator semantics of the engine. A batch of inputs shares one set of
weights, so the backward pass accumulates each weight's gradient over the
whole batch automatically.
"""

from __future__ import annotations
from typing import Callable, Iterator, List, Optional, Sequence

import numpy as np

from ..core.buffers import Gradients, Values
from ..core.node import NodeId
from ..ops.functional import tanh
from .view import View

Activation = Callable[[NodeId], object]


def input_layer(ops, batch_size: int, size: int) -> View:
    """Fresh leaves laid out as a (batch, size) view."""
    return View(ops.vars(batch_size * size), (batch_size, size))


class FullyConnectedLayer:
    """
    Dense layer: out[b, o] = act(bias[o] + Σ_i in[b, i] * w[i, o]).

    Node layout on the tape: `in*out` weight leaves (row-major (in, out)),
    then `out` bias leaves, then the computed outputs.

    Attributes:
        batch_size (int): Rows of the input view
        input_size (int): Columns of the input view
        output_size (int): Units in this layer
    """

    def __init__(self, inputs: View, output_size: int, ops,
                 activation: Optional[Activation] = None):
        if len(inputs.shape) != 2:
            raise ValueError(f"inputs must be a (batch, features) view, got shape {inputs.shape}")
        self.batch_size, self.input_size = inputs.shape
        self.output_size = int(output_size)

        n_weights = self.input_size * self.output_size
        params = ops.vars(n_weights + self.output_size)
        self._weights = View(params[:n_weights], (self.input_size, self.output_size))
        self._biases = View(params[n_weights:], (self.output_size,))

        outputs: List[NodeId] = []
        for b, o in np.ndindex(self.batch_size, self.output_size):
            acc = self._biases[o]
            for i in range(self.input_size):
                acc = ops.insert(acc + inputs[b, i] * self._weights[i, o])
            if activation is not None:
                acc = ops.insert(activation(acc))
            outputs.append(acc)
        self._outputs = View(outputs, (self.batch_size, self.output_size))

    @property
    def weights(self) -> View:
        return self._weights

    @property
    def biases(self) -> View:
        return self._biases

    @property
    def outputs(self) -> View:
        return self._outputs

    def parameters(self) -> Iterator[NodeId]:
        """Weights (row-major) then biases: the serialization order."""
        yield from self._weights
        yield from self._biases

    def init_parameters(self, values: Values, rng: np.random.Generator):
        """Weights ~ U[-0.05, 0.05), biases = 0."""
        draws = rng.uniform(-0.05, 0.05, size=self._weights.size)
        for node, value in zip(self._weights, draws):
            values[node] = value
        for node in self._biases:
            values[node] = 0.0

    def update_weights(self, values: Values, gradients: Gradients):
        """Plain descent step: value -= gradient (gradients already scaled)."""
        for node in self.parameters():
            values[node] -= gradients[node]


class MultiLayerPerceptron:
    """
    Stack of fully connected layers; each layer reads the previous layer's
    outputs. Hidden layers use `activation` (tanh by default), the last
    layer uses `output_activation` (linear by default).
    """

    def __init__(self, inputs: View, layer_sizes: Sequence[int], ops,
                 activation: Optional[Activation] = tanh,
                 output_activation: Optional[Activation] = None):
        if len(layer_sizes) == 0:
            raise ValueError("Network must have at least one layer")
        self.layers: List[FullyConnectedLayer] = []
        prev = inputs
        for k, size in enumerate(layer_sizes):
            last = k == len(layer_sizes) - 1
            layer = FullyConnectedLayer(prev, size, ops,
                                        output_activation if last else activation)
            self.layers.append(layer)
            prev = layer.outputs

    @property
    def outputs(self) -> View:
        return self.layers[-1].outputs

    def parameters(self) -> Iterator[NodeId]:
        for layer in self.layers:
            yield from layer.parameters()

    def init_parameters(self, values: Values, rng: np.random.Generator):
        for layer in self.layers:
            layer.init_parameters(values, rng)

    def update_weights(self, values: Values, gradients: Gradients):
        for layer in self.layers:
            layer.update_weights(values, gradients)
