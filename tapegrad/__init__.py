# tapegrad/__init__.py
# Reverse-mode automatic differentiation over an append-only operation tape

from .core import (
    TapegradError, GraphReferenceError, BufferLengthError, SerializationError,
    Expr, NodeId, Op, Var, UnaryOp, BinaryOp,
    Operations, Values, Gradients,
    forward, backward, gradient_of,
    check_gradient, numerical_gradient,
)
from .ops import Unary, Binary
from .ops.functional import (
    neg, recip, pow2, ln, ln1p, exp, exp2, expm1, tanh,
    add, sub, mul, div, pow,
)

__all__ = [
    # Errors
    'TapegradError', 'GraphReferenceError', 'BufferLengthError', 'SerializationError',
    # Graph
    'Expr', 'NodeId', 'Op', 'Var', 'UnaryOp', 'BinaryOp', 'Operations',
    # Buffers
    'Values', 'Gradients',
    # Engine
    'forward', 'backward', 'gradient_of',
    # Validation
    'check_gradient', 'numerical_gradient',
    # Operators
    'Unary', 'Binary',
    'neg', 'recip', 'pow2', 'ln', 'ln1p', 'exp', 'exp2', 'expm1', 'tanh',
    'add', 'sub', 'mul', 'div', 'pow',
]
