# tapegrad/nn/serialization.py
"""
Persist layer parameter values to / from a byte stream.

Layout (every field 8 bytes, little-endian):

    layer      : input_count (u64) | output_count (u64)
                 | weights (f64, row-major (in, out)) | biases (f64)
    perceptron : layer_count (u64) | layer | layer | ...

Only values are stored; the graph structure is rebuilt by the layer
builders. A load first parses and validates the whole payload, then writes
the values, so a shape mismatch in any layer leaves `values` untouched.
"""

from __future__ import annotations
import io
from typing import BinaryIO, List, Tuple, Union

import numpy as np

from ..core.buffers import Values
from ..core.errors import SerializationError
from .layers import FullyConnectedLayer, MultiLayerPerceptron

_U64 = np.dtype("<u8")
_F64 = np.dtype("<f8")


def _read_exact(reader: BinaryIO, n_bytes: int) -> bytes:
    data = reader.read(n_bytes)
    if len(data) != n_bytes:
        raise SerializationError(
            f"unexpected end of stream: wanted {n_bytes} bytes, got {len(data)}"
        )
    return data


def _read_u64(reader: BinaryIO, count: int) -> np.ndarray:
    return np.frombuffer(_read_exact(reader, count * _U64.itemsize), dtype=_U64)


def _read_f64(reader: BinaryIO, count: int) -> np.ndarray:
    return np.frombuffer(_read_exact(reader, count * _F64.itemsize), dtype=_F64)


# ------------------------------- single layer ------------------------------- #
def serialize_layer(layer: FullyConnectedLayer, values: Values, writer: BinaryIO):
    writer.write(np.array([layer.input_size, layer.output_size], dtype=_U64).tobytes())
    params = np.array([values[node] for node in layer.parameters()], dtype=_F64)
    writer.write(params.tobytes())


def _parse_layer(layer: FullyConnectedLayer, reader: BinaryIO) -> np.ndarray:
    input_count, output_count = (int(n) for n in _read_u64(reader, 2))
    expected = (layer.input_size, layer.output_size)
    actual = (input_count, output_count)
    if expected != actual:
        raise SerializationError(f"Layer shape mismatch: expected {expected} but got {actual}")
    n_params = layer.input_size * layer.output_size + layer.output_size
    return _read_f64(reader, n_params)


def _commit(layer: FullyConnectedLayer, values: Values, params: np.ndarray):
    for node, value in zip(layer.parameters(), params):
        values[node] = value


def deserialize_layer(layer: FullyConnectedLayer, values: Values, reader: BinaryIO):
    params = _parse_layer(layer, reader)
    _commit(layer, values, params)


# ------------------------------- perceptron -------------------------------- #
def serialize_mlp(mlp: MultiLayerPerceptron, values: Values, writer: BinaryIO):
    writer.write(np.array([len(mlp.layers)], dtype=_U64).tobytes())
    for layer in mlp.layers:
        serialize_layer(layer, values, writer)


def deserialize_mlp(mlp: MultiLayerPerceptron, values: Values, reader: BinaryIO):
    layer_count = int(_read_u64(reader, 1)[0])
    if layer_count != len(mlp.layers):
        raise SerializationError(
            f"Layer count mismatch: expected {len(mlp.layers)} but got {layer_count}"
        )
    staged: List[Tuple[FullyConnectedLayer, np.ndarray]] = [
        (layer, _parse_layer(layer, reader)) for layer in mlp.layers
    ]
    for layer, params in staged:
        _commit(layer, values, params)


# --------------------------------- bytes ----------------------------------- #
Model = Union[FullyConnectedLayer, MultiLayerPerceptron]


def dumps(model: Model, values: Values) -> bytes:
    buf = io.BytesIO()
    if isinstance(model, MultiLayerPerceptron):
        serialize_mlp(model, values, buf)
    else:
        serialize_layer(model, values, buf)
    return buf.getvalue()


def loads(model: Model, values: Values, data: bytes):
    buf = io.BytesIO(data)
    if isinstance(model, MultiLayerPerceptron):
        deserialize_mlp(model, values, buf)
    else:
        deserialize_layer(model, values, buf)
