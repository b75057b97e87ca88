# tapegrad/nn/view.py
from __future__ import annotations
from typing import Iterator, Sequence, Tuple

import numpy as np


class View:
    """
    Row-major multi-dimensional addressing over a flat sequence.

    Layers keep their nodes in flat lists (weights, biases, outputs) and use
    views to address them as matrices:

        weights = View(nodes[:n_in * n_out], (n_in, n_out))
        weights[i, o]          # == nodes[i * n_out + o]

    The view never copies `data`; slicing the underlying list is up to the
    caller.
    """

    __slots__ = ("data", "shape", "strides")

    def __init__(self, data: Sequence, shape: Tuple[int, ...]):
        shape = tuple(int(s) for s in shape)
        size = int(np.prod(shape, dtype=np.int64)) if shape else 1
        if len(data) != size:
            raise ValueError(f"data of length {len(data)} does not fit shape {shape}")
        self.data = data
        self.shape = shape
        self.strides = _row_major_strides(shape)

    @property
    def size(self) -> int:
        return len(self.data)

    def __len__(self) -> int:
        return self.shape[0] if self.shape else 1

    def __repr__(self):
        return f"View(shape={self.shape})"

    def flatten(self, index: Tuple[int, ...]) -> int:
        """Multi-index -> offset into `data`."""
        if len(index) != len(self.shape):
            raise IndexError(f"index {index} has wrong rank for shape {self.shape}")
        offset = 0
        for i, n, stride in zip(index, self.shape, self.strides):
            if not 0 <= i < n:
                raise IndexError(f"index {index} out of range for shape {self.shape}")
            offset += i * stride
        return offset

    def unflatten(self, offset: int) -> Tuple[int, ...]:
        """Offset into `data` -> multi-index."""
        if not 0 <= offset < self.size:
            raise IndexError(f"offset {offset} out of range for size {self.size}")
        return tuple(int(i) for i in np.unravel_index(offset, self.shape))

    def __getitem__(self, index):
        if not isinstance(index, tuple):
            index = (index,)
        return self.data[self.flatten(index)]

    def indices(self) -> Iterator[Tuple[int, ...]]:
        """All multi-indices in row-major order."""
        return iter(np.ndindex(*self.shape))

    def __iter__(self):
        """Elements in row-major order."""
        return iter(self.data)

    def reshape(self, shape: Tuple[int, ...]) -> View:
        return View(self.data, shape)


def _row_major_strides(shape: Tuple[int, ...]) -> Tuple[int, ...]:
    strides = []
    step = 1
    for n in reversed(shape):
        strides.append(step)
        step *= n
    return tuple(reversed(strides))
