# tapegrad/visualize.py
"""
Export an `Operations` tape as a Graphviz diagram.

Value nodes (`n{i}`, boxes) are drawn for every leaf and for labelled
computed nodes; every unary/binary record gets an operation node (`op{i}`,
diamond) labelled with its operator symbol. Unlabelled intermediate values
are elided, so edges then run operation-to-operation.

    dot = export_to_dot(ops, labels={a: "a", loss: "loss"})
    print(dot.source)
"""

from __future__ import annotations
from collections import defaultdict
from typing import Callable, Mapping, Optional, Union

from graphviz import Digraph

from .core.node import NodeId, Var

Labels = Union[Mapping[NodeId, str], Callable[[NodeId], str], None]
Ranks = Union[Mapping[NodeId, int], Callable[[NodeId], Optional[int]], None]


def _lookup(table, node, default):
    if table is None:
        return default
    if callable(table):
        return table(node)
    return table.get(node, default)


def export_to_dot(ops, labels: Labels = None, ranks: Ranks = None) -> Digraph:
    """
    Build a left-to-right Digraph of the tape. Read-only.

    Args:
        ops: Operations tape
        labels: NodeId -> display text (mapping or callable); empty = none
        ranks: NodeId -> rank; nodes sharing a rank are drawn side by side
    """
    graph = Digraph(
        name="ComputationGraph",
        graph_attr={"rankdir": "LR"},
        node_attr={"shape": "record", "style": "rounded,filled"},
    )

    def label_of(node: NodeId) -> str:
        return _lookup(labels, node, "") or ""

    def emits_value(node: NodeId) -> bool:
        # Always emit variables; computed values only when labelled
        return isinstance(ops[node], Var) or bool(label_of(node))

    def source(node: NodeId) -> str:
        return f"n{node.index}" if emits_value(node) else f"op{node.index}"

    # Value nodes
    for node in ops.node_ids():
        if emits_value(node):
            fill = "lightblue" if isinstance(ops[node], Var) else "lightyellow"
            graph.node(f"n{node.index}", label=label_of(node), shape="box", fillcolor=fill)

    # Operation nodes
    for node in ops.node_ids():
        record = ops[node]
        if isinstance(record, Var):
            continue
        graph.node(
            f"op{node.index}", label=record.op.symbol, shape="diamond", regular="true",
            fillcolor="lightgreen", width="0.5", height="0.5", fixedsize="true",
        )

    # Rank constraints
    rank_groups = defaultdict(list)
    for node in ops.node_ids():
        rank = _lookup(ranks, node, None)
        if rank is not None:
            rank_groups[rank].append(node)
    for rank in sorted(rank_groups):
        group = rank_groups[rank]
        if len(group) > 1:
            with graph.subgraph() as same:
                same.attr(rank="same")
                for node in group:
                    same.node(f"n{node.index}")

    # Connections
    for node in ops.node_ids():
        record = ops[node]
        for operand in record.operands:
            graph.edge(source(operand), f"op{node.index}")
        if record.operands and emits_value(node):
            graph.edge(f"op{node.index}", f"n{node.index}")

    return graph


def write_dot(ops, path, labels: Labels = None, ranks: Ranks = None) -> str:
    """Write the DOT source to `path` and return it."""
    dot = export_to_dot(ops, labels, ranks)
    with open(path, "w", encoding="utf-8") as f:
        f.write(dot.source)
    return dot.source
