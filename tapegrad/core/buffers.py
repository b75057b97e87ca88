# tapegrad/core/buffers.py
from __future__ import annotations
import operator
import numpy as np
from typing import Iterator

from .errors import BufferLengthError


class _Buffer:
    """
    Dense float64 array with one slot per NodeId.

    Buffers are owned by the caller and live independently of the graph, so
    they can be reused across many forward/backward passes (e.g. once per
    training example) without reallocating.
    """

    _default = 0.0

    def __init__(self, length: int = 0):
        self.data = np.full(int(length), self._default, dtype=np.float64)

    def __len__(self) -> int:
        return self.data.shape[0]

    def __iter__(self) -> Iterator[float]:
        return iter(self.data)

    def _slot(self, node) -> int:
        # NodeIds and plain non-negative ints; no wrap-around from the end
        index = operator.index(node)
        if index < 0:
            raise IndexError(f"buffer index must be non-negative, but got {index}")
        return index

    def __getitem__(self, node) -> np.float64:
        return self.data[self._slot(node)]

    def __setitem__(self, node, value: float):
        self.data[self._slot(node)] = value

    def __repr__(self):
        return f"{type(self).__name__}({self.data!r})"

    def fill(self, value: float):
        self.data.fill(value)

    def resize(self, new_len: int, value: float = None):
        """Grow (padding with `value`, default NaN/0.0) or truncate in place."""
        if value is None:
            value = self._default
        old_len = len(self)
        if new_len <= old_len:
            self.data = self.data[:new_len].copy()
        else:
            pad = np.full(new_len - old_len, value, dtype=np.float64)
            self.data = np.concatenate([self.data, pad])

    def copy(self):
        out = type(self)(0)
        out.data = self.data.copy()
        return out


class Values(_Buffer):
    """
    Node values. Slots start as NaN so reading a leaf the caller forgot to
    set is detectable: the NaN propagates to every dependent node.
    """

    _default = np.nan


class Gradients(_Buffer):
    """Node gradients ∂target/∂node, written only by the backward evaluator."""

    _default = 0.0

    def accumulate(self, other: Gradients):
        """Elementwise `self += other` (minibatch accumulation)."""
        if len(self) != len(other):
            raise BufferLengthError(
                f"cannot accumulate gradients of length {len(other)} into length {len(self)}"
            )
        self.data += other.data

    def __iadd__(self, other: Gradients) -> Gradients:
        self.accumulate(other)
        return self
