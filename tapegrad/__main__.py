"""
Demo: build a small graph, print its summary and emit Graphviz DOT.

    python -m tapegrad simple | dot -Tsvg > simple.svg  # summary on stderr
    python -m tapegrad layers -o mlp.dot # 2 -> 5 -> 3 perceptron
"""

import argparse
import contextlib
import sys

import numpy as np

from .core.buffers import Values
from .core.graph_utils import print_graph_summary
from .core.tape import Operations
from .nn.layers import MultiLayerPerceptron, input_layer
from .visualize import export_to_dot


def build_simple():
    """loss = (y - (a*x + b))^2 evaluated at a=2, b=3, x=10, y=-2."""
    ops = Operations()
    a, x, b, y = ops.vars(4)
    y_pred = ops.insert(a * x + b)
    loss = ops.insert((y - y_pred).pow2())

    values = Values(len(ops))
    values[a], values[b], values[x], values[y] = 2.0, 3.0, 10.0, -2.0
    ops.forward(values)

    names = {a: "a", x: "x", b: "b", y: "y", y_pred: "y_pred", loss: "loss"}
    labels = {}
    for node in ops.node_ids():
        value = values[node]
        labels[node] = f"{names[node]} = {value}" if node in names else f"{value}"
    return ops, labels, None


def build_layers():
    ops = Operations()
    inputs = input_layer(ops, 1, 2)
    mlp = MultiLayerPerceptron(inputs, [5, 3], ops)

    labels, ranks = {}, {}
    for i, node in enumerate(inputs):
        labels[node] = f"l0 a_{i}"
        ranks[node] = 0
    for k, layer in enumerate(mlp.layers, start=1):
        for (i, o) in layer.weights.indices():
            labels[layer.weights[i, o]] = f"l{k} w_{i},{o}"
        for (o,) in layer.biases.indices():
            labels[layer.biases[o]] = f"l{k} b_{o}"
        for (b, o) in layer.outputs.indices():
            labels[layer.outputs[b, o]] = f"l{k} a_{o}"
            ranks[layer.outputs[b, o]] = k

    values = Values(len(ops))
    for node in inputs:
        values[node] = 0.0
    mlp.init_parameters(values, np.random.default_rng(0))
    ops.forward(values)
    return ops, labels, ranks


EXAMPLES = {"simple": build_simple, "layers": build_layers}


def main(argv=None):
    parser = argparse.ArgumentParser(prog="tapegrad", description=__doc__.splitlines()[1])
    parser.add_argument("example", choices=sorted(EXAMPLES), nargs="?", default="simple")
    parser.add_argument("-o", "--output", help="write DOT here instead of stdout")
    parser.add_argument("--quiet", action="store_true", help="skip the graph summary")
    args = parser.parse_args(argv)

    ops, labels, ranks = EXAMPLES[args.example]()
    if not args.quiet:
        # stdout carries only DOT so it can be piped into `dot`
        with contextlib.redirect_stdout(sys.stderr):
            print_graph_summary(ops, detailed=True)

    dot = export_to_dot(ops, labels=labels, ranks=ranks)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(dot.source)
        print(f"Wrote {args.output}")
    else:
        sys.stdout.write(dot.source)
    return 0


if __name__ == "__main__":
    sys.exit(main())
