"""
Forward/backward evaluator tests.

Covers the binary-operator table at (a, b) = (3, 4), node reuse, buffer
reuse across passes, the zero-gradient skip, and the end-to-end linear
regression scenario.
"""

import math

import numpy as np
import pytest

from tapegrad import (
    Binary, BinaryOp, BufferLengthError, GraphReferenceError, Gradients,
    Operations, Unary, UnaryOp, Values, backward, forward, gradient_of,
)


def _binary_case(op):
    ops = Operations()
    a, b = ops.vars(2)
    c = ops.insert(BinaryOp(op, (a, b)))

    values = Values(len(ops))
    values[a] = 3.0
    values[b] = 4.0
    ops.forward(values)

    gradients = Gradients(len(ops))
    ops.backward(values, gradients, c, 1.0)
    return values[c], gradients[a], gradients[b]


@pytest.mark.parametrize("op, vc, dcda, dcdb", [
    (Binary.ADD, 7.0, 1.0, 1.0),
    (Binary.SUB, -1.0, 1.0, -1.0),
    (Binary.MUL, 12.0, 4.0, 3.0),
    (Binary.DIV, 0.75, 0.25, -0.25 * 0.75),
    (Binary.POW, 81.0, 108.0, 81.0 * math.log(3.0)),
])
def test_binary_ops(op, vc, dcda, dcdb):
    value, ga, gb = _binary_case(op)
    assert value == pytest.approx(vc)
    assert ga == pytest.approx(dcda)
    assert gb == pytest.approx(dcdb)


def test_pow_exponent_gradient_value():
    _, _, gb = _binary_case(Binary.POW)
    assert gb == pytest.approx(88.9875953821169, rel=1e-12)


def test_node_reuse_accumulates():
    ops = Operations()
    a = ops.var()
    b = ops.insert(a + a)

    values = Values(len(ops))
    values[a] = 1.0
    ops.forward(values)
    assert values[b] == 2.0

    gradients = Gradients(len(ops))
    ops.backward(values, gradients, b, 1.0)
    assert gradients[a] == 2.0


def test_shared_subexpression_sums_all_paths():
    # f = (x*y) * (x*y) with the product reused: df/dx = 2*x*y^2
    ops = Operations()
    x, y = ops.vars(2)
    p = ops.insert(x * y)
    f = ops.insert(p * p)

    values = Values(len(ops))
    values[x], values[y] = 2.0, 3.0
    forward(ops, values)
    assert values[f] == 36.0

    grads = gradient_of(ops, values, f, [x, y])
    np.testing.assert_allclose(grads, [2 * 2.0 * 9.0, 2 * 4.0 * 3.0])


def test_var_slots_untouched_by_forward():
    ops = Operations()
    a, b = ops.vars(2)
    c = ops.insert(a * b)
    values = Values(len(ops))
    values[a] = 5.0
    forward(ops, values)
    # b was never set: NaN flows into c, a keeps its value
    assert values[a] == 5.0
    assert math.isnan(values[b])
    assert math.isnan(values[c])


def test_seed_scales_gradients():
    ops = Operations()
    a, b = ops.vars(2)
    c = ops.insert(a * b)
    values = Values(len(ops))
    values[a], values[b] = 3.0, 4.0
    forward(ops, values)

    gradients = Gradients(len(ops))
    backward(ops, values, gradients, c, 0.5)
    assert gradients[c] == 0.5
    assert gradients[a] == 2.0
    assert gradients[b] == 1.5


def test_nodes_after_target_get_zero_gradient():
    ops = Operations()
    a = ops.var()
    b = ops.insert(a.exp())
    c = ops.insert(b * a)

    values = Values(len(ops))
    values[a] = 0.0
    forward(ops, values)
    gradients = Gradients(len(ops))
    backward(ops, values, gradients, b)
    assert gradients[c] == 0.0
    assert gradients[a] == pytest.approx(1.0)


def test_buffer_reuse_has_no_residue():
    ops = Operations()
    a, x = ops.vars(2)
    y = ops.insert((a * x).tanh())

    values = Values(len(ops))
    gradients = Gradients(len(ops))

    values[a], values[x] = 0.3, 2.0
    forward(ops, values)
    backward(ops, values, gradients, y)
    first = gradients.data.copy()

    values[a], values[x] = -1.5, 0.25
    forward(ops, values)
    backward(ops, values, gradients, y)
    second = gradients.data.copy()

    fresh_values = Values(len(ops))
    fresh_values[a], fresh_values[x] = -1.5, 0.25
    forward(ops, fresh_values)
    fresh = gradient_of(ops, fresh_values, y)

    np.testing.assert_array_equal(second, fresh.data)
    assert not np.array_equal(first, second)


def _random_graph(rng, n_leaves=4, n_ops=40):
    """Random graph over well-behaved primitives (finite partials)."""
    ops = Operations()
    nodes = ops.vars(n_leaves)
    unaries = [Unary.NEG, Unary.TANH, Unary.POW2, Unary.EXP]
    binaries = [Binary.ADD, Binary.SUB, Binary.MUL]
    for _ in range(n_ops):
        if rng.random() < 0.4:
            op = unaries[rng.integers(len(unaries))]
            a = nodes[rng.integers(len(nodes))]
            nodes.append(ops.insert(UnaryOp(op, a)))
        else:
            op = binaries[rng.integers(len(binaries))]
            a = nodes[rng.integers(len(nodes))]
            b = nodes[rng.integers(len(nodes))]
            nodes.append(ops.insert(BinaryOp(op, (a, b))))
        # keep magnitudes tame so exp/pow2 stay finite
        nodes[-1] = ops.insert(nodes[-1].tanh())
    return ops, nodes


def test_zero_skip_is_unobservable():
    rng = np.random.default_rng(7)
    for _ in range(10):
        ops, nodes = _random_graph(rng)
        values = Values(len(ops))
        for leaf in nodes[:4]:
            values[leaf] = rng.uniform(-1.0, 1.0)
        forward(ops, values)

        skipped = Gradients(len(ops))
        full = Gradients(len(ops))
        target = nodes[-1]
        backward(ops, values, skipped, target, 1.0, skip_zero=True)
        backward(ops, values, full, target, 1.0, skip_zero=False)
        np.testing.assert_array_equal(skipped.data, full.data)


def test_negative_zero_seed_is_skipped():
    # -0.0 == 0.0, so a -0.0 seed propagates nothing (not even signed zeros)
    ops = Operations()
    a = ops.var()
    b = ops.insert(-a)
    values = Values(len(ops))
    values[a] = 1.0
    forward(ops, values)

    gradients = Gradients(len(ops))
    backward(ops, values, gradients, b, -0.0)
    assert gradients[a] == 0.0
    assert not np.signbit(gradients[a])

    unskipped = Gradients(len(ops))
    backward(ops, values, unskipped, b, -0.0, skip_zero=False)
    assert unskipped[a] == gradients[a]


def test_numeric_edge_cases_propagate():
    ops = Operations()
    a, b = ops.vars(2)
    q = ops.insert(a / b)
    l = ops.insert(b.ln())
    values = Values(len(ops))
    values[a], values[b] = 1.0, 0.0
    forward(ops, values)
    assert values[q] == np.inf
    assert values[l] == -np.inf

    gradients = Gradients(len(ops))
    backward(ops, values, gradients, q)
    assert gradients[a] == np.inf


def test_forward_rejects_wrong_length():
    ops = Operations()
    a = ops.var()
    ops.insert(a.exp())
    with pytest.raises(BufferLengthError):
        forward(ops, Values(1))


def test_backward_rejects_wrong_length():
    ops = Operations()
    a = ops.var()
    b = ops.insert(a.exp())
    values = Values(len(ops))
    values[a] = 0.0
    forward(ops, values)
    with pytest.raises(BufferLengthError):
        backward(ops, values, Gradients(3), b)
    with pytest.raises(BufferLengthError):
        backward(ops, Values(1), Gradients(2), b)


def test_backward_rejects_foreign_target():
    ops = Operations()
    a = ops.var()
    other = Operations()
    foreign = other.vars(4)[-1]
    values = Values(len(ops))
    values[a] = 1.0
    with pytest.raises(GraphReferenceError):
        backward(ops, values, Gradients(len(ops)), foreign)


def test_linear_regression_training():
    """y_pred = a*x + b fitted to y = 2x + 3 by minibatch gradient descent."""
    ops = Operations()
    a, x, b, y = ops.vars(4)
    y_pred = ops.insert(a * x + b)
    loss = ops.insert((y - y_pred).pow2())

    values = Values(len(ops))
    acc = Gradients(len(ops))
    gradients = Gradients(len(ops))

    values[a] = 0.5
    values[b] = -0.5

    lr = 0.005
    batches = [
        [-3.6, 2.2, 1.0],
        [3.5, 20.1, 0.4],
        [-0.3, -0.10, 4.0],
        [-10.0, 5.1, 8.0],
        [4.6, 5.9, -6.7],
    ]
    for _ in range(50):
        for batch in batches:
            acc.fill(0.0)
            for vx in batch:
                values[x] = vx
                values[y] = 2.0 * vx + 3.0
                forward(ops, values)
                backward(ops, values, gradients, loss, lr)
                acc += gradients
            values[a] -= acc[a]
            values[b] -= acc[b]

    assert abs(values[a] - 2.0) < 0.2, f"expected a to be close to 2.0 but got {values[a]}"
    assert abs(values[b] - 3.0) < 0.2, f"expected b to be close to 3.0 but got {values[b]}"
