# tapegrad/core/expr.py
from __future__ import annotations
from typing import Any

from ..ops.unary import Unary
from ..ops.binary import Binary


class Expr:
    """
    Lazily built arithmetic expression over graph nodes.

    Expressions record *what* to insert; nothing touches a graph until the
    expression is passed to `Operations.insert`, which resolves operands
    depth-first (left before right) and appends the expression's own record
    last. A `NodeId` is itself an `Expr` that resolves to itself, so

        y_pred = ops.insert(a * x + b)
        loss   = ops.insert((y - y_pred).pow2())

    inserts `mul`, `add`, `sub`, `pow2` records in that order.

    Plain numbers are rejected: every constant is a leaf (`ops.var()`) whose
    value the caller supplies.
    """

    __slots__ = ()

    @property
    def operands(self):
        """Sub-expressions resolved, left to right, before this node."""
        raise NotImplementedError

    def record(self, *nodes):
        """Operation record for this node, given its resolved operands."""
        raise NotImplementedError

    # Operator overloading for binary primitives
    def __add__(self, other):
        return BinaryExpr(Binary.ADD, self, other)

    def __sub__(self, other):
        return BinaryExpr(Binary.SUB, self, other)

    def __mul__(self, other):
        return BinaryExpr(Binary.MUL, self, other)

    def __truediv__(self, other):
        return BinaryExpr(Binary.DIV, self, other)

    def __pow__(self, other):
        return BinaryExpr(Binary.POW, self, other)

    def __neg__(self):
        return UnaryExpr(Unary.NEG, self)

    # Unary primitives
    def neg(self) -> UnaryExpr:
        return UnaryExpr(Unary.NEG, self)

    def recip(self) -> UnaryExpr:
        return UnaryExpr(Unary.RECIP, self)

    def pow2(self) -> UnaryExpr:
        return UnaryExpr(Unary.POW2, self)

    def ln(self) -> UnaryExpr:
        return UnaryExpr(Unary.LN, self)

    def ln1p(self) -> UnaryExpr:
        return UnaryExpr(Unary.LN1P, self)

    def exp(self) -> UnaryExpr:
        return UnaryExpr(Unary.EXP, self)

    def exp2(self) -> UnaryExpr:
        return UnaryExpr(Unary.EXP2, self)

    def expm1(self) -> UnaryExpr:
        return UnaryExpr(Unary.EXPM1, self)

    def tanh(self) -> UnaryExpr:
        return UnaryExpr(Unary.TANH, self)


def _as_expr(x: Any) -> Expr:
    """Only graph nodes and expressions may appear as operands."""
    if not isinstance(x, Expr):
        raise TypeError(
            f"expression operands must be NodeIds or expressions, but got {type(x)}; "
            f"insert a var() for constants and set its value"
        )
    return x


class UnaryExpr(Expr):
    __slots__ = ("op", "operand")

    def __init__(self, op: Unary, operand):
        self.op = op
        self.operand = _as_expr(operand)

    def __repr__(self):
        return f"UnaryExpr({self.op.name}, {self.operand!r})"

    @property
    def operands(self):
        return (self.operand,)

    def record(self, a):
        from .node import UnaryOp  # local import to avoid cycles
        return UnaryOp(self.op, a)


class BinaryExpr(Expr):
    __slots__ = ("op", "lhs", "rhs")

    def __init__(self, op: Binary, lhs, rhs):
        self.op = op
        self.lhs = _as_expr(lhs)
        self.rhs = _as_expr(rhs)

    def __repr__(self):
        return f"BinaryExpr({self.op.name}, {self.lhs!r}, {self.rhs!r})"

    @property
    def operands(self):
        return (self.lhs, self.rhs)

    def record(self, a, b):
        from .node import BinaryOp  # local import to avoid cycles
        return BinaryOp(self.op, (a, b))
