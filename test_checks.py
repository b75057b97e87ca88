"""
Reverse-mode gradients versus bumping (finite differences), plus graph
diagnostics and the demo entry point.
"""

import numpy as np
import pytest

from tapegrad import Operations, Values
from tapegrad.__main__ import main
from tapegrad.core.checks import check_gradient, numerical_gradient
from tapegrad.core.graph_utils import get_graph_stats, print_graph_summary


def _mixed_graph():
    # f = ln1p(x^2) * exp2(y) / (1 + tanh(x*y)) - x^y ... built from leaves only
    ops = Operations()
    x, y, one = ops.vars(3)
    f = ops.insert(
        (x.pow2().ln1p() * y.exp2()) / (one + (x * y).tanh()) - x ** y + (y.recip() - x.expm1())
    )
    values = Values(len(ops))
    values[x], values[y], values[one] = 1.3, 0.7, 1.0
    return ops, values, f, (x, y, one)


def test_reverse_mode_matches_bumping():
    ops, values, f, (x, y, one) = _mixed_graph()
    result = check_gradient(ops, values, f, [x, y, one])
    assert result.passed, result
    assert result.max_abs_error < 1e-4


def test_numerical_gradient_restores_values():
    ops, values, f, (x, y, one) = _mixed_graph()
    ops.forward(values)
    before = values.data.copy()
    numerical_gradient(ops, values, f, [x, y])
    np.testing.assert_array_equal(values.data, before)


def test_numerical_gradient_rejects_non_leaves():
    ops, values, f, leaves = _mixed_graph()
    with pytest.raises(ValueError, match="not a leaf"):
        numerical_gradient(ops, values, f, [f])


def test_graph_stats():
    ops = Operations()
    a, x, b, y = ops.vars(4)
    y_pred = ops.insert(a * x + b)
    ops.insert((y - y_pred).pow2())
    stats = get_graph_stats(ops)
    assert stats['nodes'] == 8
    assert stats['leaves'] == 4
    assert stats['edges'] == 7
    assert stats['max_fan_in'] == 2
    assert stats['operations'] == {'var': 4, 'mul': 1, 'add': 1, 'sub': 1, 'pow2': 1}


def test_graph_stats_empty(capsys):
    stats = print_graph_summary(Operations())
    assert stats['nodes'] == 0
    assert "Empty computation graph" in capsys.readouterr().out


def test_print_graph_summary_detailed(capsys):
    ops = Operations()
    a = ops.var()
    ops.insert(a + a)
    print_graph_summary(ops, detailed=True)
    out = capsys.readouterr().out
    assert "COMPUTATION GRAPH SUMMARY" in out
    assert "Node   1: add          <- [Node0, Node0]" in out
    assert "Max fan-out:        2" in out


@pytest.mark.parametrize("example", ["simple", "layers"])
def test_demo_entry_point(example, tmp_path, capsys):
    out_path = tmp_path / f"{example}.dot"
    assert main([example, "--quiet", "-o", str(out_path)]) == 0
    assert out_path.read_text(encoding="utf-8").startswith("digraph ComputationGraph")


def test_demo_stdout_is_pure_dot(capsys):
    assert main(["simple"]) == 0
    captured = capsys.readouterr()
    assert captured.out.startswith("digraph ComputationGraph")
    assert "COMPUTATION GRAPH SUMMARY" not in captured.out
    assert "COMPUTATION GRAPH SUMMARY" in captured.err


def test_checks_exported_from_core():
    import tapegrad.core as core
    assert core.check_gradient is check_gradient
    assert core.numerical_gradient is numerical_gradient
