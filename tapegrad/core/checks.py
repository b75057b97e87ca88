# tapegrad/core/checks.py
"""
Finite-difference validation of reverse-mode gradients.

Reverse mode gives ∂target/∂x for every leaf in one backward sweep; bumping
gives the same numbers with one forward sweep per leaf (and truncation
error). Comparing the two is the standard sanity check for new graphs and
new primitives.

    result = check_gradient(ops, values, loss, wrt=[a, b])
    assert result.passed, result
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy.optimize import approx_fprime

from .buffers import Values
from .engine import forward, gradient_of
from .node import NodeId, Var


@dataclass
class GradientCheckResult:
    """Outcome of one analytic-versus-numeric gradient comparison."""
    analytic: np.ndarray
    numeric: np.ndarray
    max_abs_error: float
    passed: bool


def numerical_gradient(ops, values: Values, target: NodeId, wrt: Sequence[NodeId],
                       epsilon: float = 1e-6) -> np.ndarray:
    """
    Forward-difference gradient of `target` w.r.t. the leaves in `wrt`.

    Every evaluation re-runs the forward sweep on a scratch copy of
    `values`, so the caller's buffer is left exactly as it was.
    """
    for node in wrt:
        if not isinstance(ops[node], Var):
            raise ValueError(f"{node!r} is not a leaf; only Var nodes can be bumped")

    scratch = values.copy()
    t = ops.check_node(target)
    idx = [ops.check_node(n) for n in wrt]

    def f(x):
        scratch.data[idx] = x
        forward(ops, scratch)
        return scratch.data[t]

    x0 = values.data[idx].astype(np.float64)
    return np.atleast_1d(approx_fprime(x0, f, epsilon))


def check_gradient(ops, values: Values, target: NodeId, wrt: Sequence[NodeId],
                   epsilon: float = 1e-6, rtol: float = 1e-4,
                   atol: float = 1e-6) -> GradientCheckResult:
    """
    Compare reverse-mode and finite-difference gradients at the current
    leaf values. `values` is re-populated by a forward pass first.
    """
    forward(ops, values)
    analytic = gradient_of(ops, values, target, wrt)
    numeric = numerical_gradient(ops, values, target, wrt, epsilon)
    err = np.abs(analytic - numeric)
    return GradientCheckResult(
        analytic=analytic,
        numeric=numeric,
        max_abs_error=float(err.max()) if err.size else 0.0,
        passed=bool(np.allclose(analytic, numeric, rtol=rtol, atol=atol)),
    )
