"""
Graph diagnostics: structure statistics and printable summaries of a tape.
"""

import numpy as np
from typing import Dict
from collections import Counter

from .node import Var


def _op_name(node) -> str:
    if isinstance(node, Var):
        return "var"
    return node.op.name.lower()


def _fan_outs(ops):
    fan_outs = [0] * len(ops)
    for node in ops.nodes:
        for operand in node.operands:
            fan_outs[operand.index] += 1
    return fan_outs


def get_graph_stats(ops) -> Dict:
    """
    Collect graph statistics without printing.

    Returns:
        dict with node/edge counts, fan-in and fan-out (max, mean) and a
        per-operation count.
    """
    if not ops.nodes:
        return {
            'nodes': 0,
            'edges': 0,
            'leaves': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    n_nodes = len(ops)
    fan_ins = [len(node.operands) for node in ops.nodes]
    fan_outs = _fan_outs(ops)
    op_counter = Counter(_op_name(node) for node in ops.nodes)

    return {
        'nodes': n_nodes,
        'edges': sum(fan_ins),
        'leaves': op_counter.get('var', 0),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(op_counter)
    }


def print_graph_summary(ops, detailed: bool = False, max_nodes: int = 100) -> Dict:
    """
    Print a summary of the graph structure.

    Args:
        ops: Operations tape
        detailed: also list individual nodes (only for graphs of at most
                  `max_nodes` nodes)

    Returns:
        The statistics dictionary from `get_graph_stats`.
    """
    stats = get_graph_stats(ops)
    if stats['nodes'] == 0:
        print("Empty computation graph")
        return stats

    print("\n" + "="*70)
    print("COMPUTATION GRAPH SUMMARY")
    print("="*70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Leaf variables:     {stats['leaves']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_type:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed and stats['nodes'] <= max_nodes:
        print()
        print("="*70)
        print("DETAILED NODE LIST")
        print("="*70)
        for i, node in enumerate(ops.nodes):
            if node.operands:
                operand_info = ", ".join(f"Node{n.index}" for n in node.operands)
                print(f"Node {i:3d}: {_op_name(node):12s} <- [{operand_info}]")
            else:
                print(f"Node {i:3d}: {_op_name(node):12s} [leaf/input]")

    print("="*70 + "\n")
    return stats
