# tapegrad/core/engine.py
from __future__ import annotations
import numpy as np
from typing import Optional, Sequence, Union

from .buffers import Gradients, Values
from .errors import BufferLengthError
from .node import NodeId, UnaryOp, BinaryOp


def _check_length(ops, buffer, what: str):
    if len(buffer) != len(ops):
        raise BufferLengthError(
            f"{what} buffer has {len(buffer)} slots but the graph has {len(ops)} nodes"
        )


def forward(ops, values: Values):
    """
    Compute every non-leaf value in one sweep over the tape.

    Leaf (Var) slots must already be set by the caller; they are left
    untouched. Because operands always precede the node that reads them,
    visiting nodes in insertion order guarantees each operand is ready.

    Numeric edge cases (x/0, ln(0), overflow, ...) produce inf/NaN silently.
    """
    _check_length(ops, values, "values")
    v = values.data
    with np.errstate(all="ignore"):
        for o, node in enumerate(ops.nodes):
            if isinstance(node, UnaryOp):
                v[o] = node.op.forward(v[node.input.index])
            elif isinstance(node, BinaryOp):
                a, b = node.inputs
                v[o] = node.op.forward(v[a.index], v[b.index])
            # Var: nothing to do


def backward(ops, values: Values, gradients: Gradients, target: NodeId,
             gradient: float = 1.0, *, skip_zero: bool = True):
    """
    Run a single reverse pass from `target`, filling `gradients` with
    ∂target/∂node (times the seed `gradient`) for every node.

    Args:
        values    : buffer already populated by `forward`.
        gradients : output buffer; reset to zero before the sweep.
        target    : node to differentiate.
        gradient  : seed written to gradients[target]; 1.0 for a plain
                    gradient, or e.g. a learning rate when the pass doubles
                    as a gradient-descent step accumulator.
        skip_zero : skip nodes whose gradient is exactly zero (-0.0 included).
                    Only an optimisation: with finite local partials the
                    result is identical either way.

    Notes:
        - For each node o, we propagate: g[i] += (∂o/∂i) * g[o].
        - Accumulation, never assignment, so a node consumed by several
          downstream nodes receives the sum over all paths.
        - The sweep starts at `target`: nodes inserted after it cannot
          feed into it.
    """
    _check_length(ops, values, "values")
    _check_length(ops, gradients, "gradients")
    t = ops.check_node(target)

    v = values.data
    g = gradients.data
    g.fill(0.0)
    g[t] = gradient

    nodes = ops.nodes
    with np.errstate(all="ignore"):
        for o in range(t, -1, -1):
            g_o = g[o]
            if skip_zero and g_o == 0.0:
                continue  # nothing to propagate
            node = nodes[o]
            if isinstance(node, UnaryOp):
                i0 = node.input.index
                g[i0] += node.op.backward(v[i0], v[o]) * g_o
            elif isinstance(node, BinaryOp):
                i0, i1 = node.inputs[0].index, node.inputs[1].index
                d0, d1 = node.op.backward(v[i0], v[i1], v[o])
                g[i0] += d0 * g_o
                g[i1] += d1 * g_o
            # Var: nothing to do


def gradient_of(ops, values: Values, target: NodeId,
                wrt: Optional[Sequence[NodeId]] = None) -> Union[Gradients, np.ndarray]:
    """
    Convenience: gradient of `target` with seed 1.0 into a fresh buffer.

    Returns the whole `Gradients` buffer, or an array of the entries for the
    nodes listed in `wrt` (in that order).
    """
    gradients = Gradients(len(ops))
    backward(ops, values, gradients, target, 1.0)
    if wrt is None:
        return gradients
    return np.array([gradients[n] for n in wrt], dtype=np.float64)
