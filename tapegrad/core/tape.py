# tapegrad/core/tape.py
from __future__ import annotations
from typing import Iterable, Iterator, List

from .errors import GraphReferenceError
from .expr import Expr
from .node import NodeId, Op, Var, UnaryOp, BinaryOp


class Operations:
    """
    Append-only tape of operation records.

    The tape is the sole authority for node identity: a record's NodeId is
    its insertion index, and every operand must already be on the tape when
    the record is appended. Insertion order is therefore a valid topological
    order, which is what lets the evaluators run in a single sweep with no
    sorting or cycle detection.

    The tape owns no numbers. Values and gradients live in separate buffers
    (`Values`, `Gradients`) so one graph can be evaluated many times, or by
    several independent buffer sets.
    """

    def __init__(self):
        self.nodes: List[Op] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Op]:
        return iter(self.nodes)

    def __getitem__(self, node: NodeId) -> Op:
        return self.nodes[self.check_node(node)]

    def __repr__(self):
        return f"Operations(len={len(self.nodes)})"

    def check_node(self, node: NodeId) -> int:
        """Return the index of `node`, raising if it was not issued by this tape."""
        if not isinstance(node, NodeId):
            raise TypeError(f"expected a NodeId, but got {type(node)}")
        if not 0 <= node.index < len(self.nodes):
            raise GraphReferenceError(
                f"{node!r} is out of range for a graph of {len(self.nodes)} nodes. "
                f"Are you using a node from another graph?"
            )
        return node.index

    def node_ids(self) -> Iterator[NodeId]:
        """NodeIds in insertion (topological) order."""
        return (NodeId(i) for i in range(len(self.nodes)))

    def insert(self, item):
        """
        Insert a record, a NodeId, an expression, or a tuple/list of those.

        - `Op` record     : appended; returns the new NodeId (the old length)
        - `NodeId`        : validated against this tape and returned unchanged
        - `Expr`          : operands resolved depth-first, then the node itself
        - tuple / list    : each item inserted in order; same container back
        """
        if isinstance(item, (Var, UnaryOp, BinaryOp)):
            return self._push(item)
        if isinstance(item, NodeId):
            self.check_node(item)
            return item
        if isinstance(item, Expr):
            return self._resolve(item)
        if isinstance(item, (tuple, list)):
            return type(item)(self.insert(x) for x in item)
        raise TypeError(f"cannot insert {type(item)} into a graph")

    def _resolve(self, expr: Expr) -> NodeId:
        # Post-order walk on an explicit stack; expression depth is unbounded.
        # Operands are pushed right to left so the left one is inserted first.
        pending = [(expr, False)]
        resolved: List[NodeId] = []
        while pending:
            node, ready = pending.pop()
            if isinstance(node, NodeId):
                self.check_node(node)
                resolved.append(node)
            elif ready:
                arity = len(node.operands)
                args = resolved[-arity:]
                del resolved[-arity:]
                resolved.append(self._push(node.record(*args)))
            else:
                pending.append((node, True))
                pending.extend((operand, False) for operand in reversed(node.operands))
        return resolved[0]

    def _push(self, op: Op) -> NodeId:
        for operand in op.operands:
            self.check_node(operand)
        self.nodes.append(op)
        return NodeId(len(self.nodes) - 1)

    def extend(self, items: Iterable) -> list:
        return [self.insert(item) for item in items]

    def var(self) -> NodeId:
        return self._push(Var())

    def vars(self, count: int) -> List[NodeId]:
        """Bulk leaf insertion: `count` consecutive Var nodes."""
        return [self._push(Var()) for _ in range(count)]

    def clear(self):
        """Drop every record. All previously issued NodeIds become invalid."""
        self.nodes.clear()

    def forward(self, values):
        from .engine import forward  # local import to avoid cycles
        forward(self, values)

    def backward(self, values, gradients, target: NodeId, gradient: float = 1.0, *,
                 skip_zero: bool = True):
        from .engine import backward  # local import to avoid cycles
        backward(self, values, gradients, target, gradient, skip_zero=skip_zero)
