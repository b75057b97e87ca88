# tapegrad/core/__init__.py

"""
Core public API: the graph, its buffers and the two evaluators.

Exports:
    NodeId        : Handle of one node (its insertion index).
    Var, UnaryOp, BinaryOp : Operation records stored on the tape.
    Operations    : Append-only tape of records; assigns NodeIds.
    Values        : Per-node values (NaN until set/computed).
    Gradients     : Per-node gradients (zero until a backward pass).
    forward       : Single sweep computing every non-leaf value.
    backward      : Single reverse sweep accumulating ∂target/∂node.
    gradient_of   : Convenience: backward into a fresh buffer.
    check_gradient, numerical_gradient : Reverse mode versus finite differences.
"""

from .errors import TapegradError, GraphReferenceError, BufferLengthError, SerializationError
from .expr import Expr
from .node import NodeId, Op, Var, UnaryOp, BinaryOp
from .tape import Operations
from .buffers import Values, Gradients
from .engine import forward, backward, gradient_of
from .checks import GradientCheckResult, check_gradient, numerical_gradient

__all__ = [
    "TapegradError", "GraphReferenceError", "BufferLengthError", "SerializationError",
    "Expr",
    "NodeId", "Op", "Var", "UnaryOp", "BinaryOp",
    "Operations",
    "Values", "Gradients",
    "forward", "backward", "gradient_of",
    "GradientCheckResult", "check_gradient", "numerical_gradient",
]
