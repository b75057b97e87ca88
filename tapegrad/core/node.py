# tapegrad/core/node.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union

from .expr import Expr
from ..ops.unary import Unary
from ..ops.binary import Binary


class NodeId(Expr):
    """
    Handle of one node in an `Operations` graph.

    The handle is the zero-based insertion index of the node; it is only
    meaningful for the graph that issued it. Handles index `Values` and
    `Gradients` buffers directly and take part in expression syntax
    (`a * x + b`).
    """

    __slots__ = ("index",)

    def __init__(self, index: int):
        self.index = int(index)

    def __index__(self) -> int:
        return self.index

    __int__ = __index__

    def __eq__(self, other):
        if isinstance(other, NodeId):
            return self.index == other.index
        return NotImplemented

    def __hash__(self):
        return hash((NodeId, self.index))

    def __lt__(self, other):
        if isinstance(other, NodeId):
            return self.index < other.index
        return NotImplemented

    def __repr__(self):
        return f"NodeId({self.index})"


@dataclass(frozen=True)
class Var:
    """
    Source leaf. The forward pass leaves its value untouched (the caller sets
    it); the backward pass has nothing to propagate to.
    """

    @property
    def operands(self) -> Tuple[NodeId, ...]:
        return ()


@dataclass(frozen=True)
class UnaryOp:
    """
    Attributes
    ----------
    op    : Unary
        Primitive applied to the operand.
    input : NodeId
        Operand; always inserted before this record.
    """
    op: Unary
    input: NodeId

    @property
    def operands(self) -> Tuple[NodeId, ...]:
        return (self.input,)


@dataclass(frozen=True)
class BinaryOp:
    """
    Attributes
    ----------
    op     : Binary
        Primitive applied to the ordered operand pair.
    inputs : (NodeId, NodeId)
        Left and right operand; both inserted before this record.
    """
    op: Binary
    inputs: Tuple[NodeId, NodeId]

    def __post_init__(self):
        object.__setattr__(self, "inputs", tuple(self.inputs))
        if len(self.inputs) != 2:
            raise TypeError(f"BinaryOp takes exactly 2 inputs, but got {len(self.inputs)}")

    @property
    def operands(self) -> Tuple[NodeId, ...]:
        return self.inputs


# One record per node, stored by value
Op = Union[Var, UnaryOp, BinaryOp]
