# tapegrad/ops/binary.py
import numpy as np
from enum import Enum


def _div_partials(a, b, c):
    b_inv = 1.0 / b
    return b_inv, -b_inv * c


def _pow_partials(a, b, c):
    """
    Local partials of c = a**b.

      ∂c/∂a = b * a^(b-1)     (not b*c/a, which is NaN at a == 0)
      ∂c/∂b = ln(a) * c
    """
    return b * np.power(a, b - 1.0), np.log(a) * c


class Binary(Enum):
    """
    Binary primitives c = f(a, b).

    `backward(a, b, c)` returns the pair (∂c/∂a, ∂c/∂b) evaluated at the
    forward point, where `c` is the already computed output.
    """
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"

    @property
    def symbol(self) -> str:
        return self.value

    def forward(self, a, b):
        return _FORWARD[self](np.float64(a), np.float64(b))

    def backward(self, a, b, c):
        da, db = _BACKWARD[self](np.float64(a), np.float64(b), np.float64(c))
        return np.float64(da), np.float64(db)


_FORWARD = {
    Binary.ADD: lambda a, b: a + b,
    Binary.SUB: lambda a, b: a - b,
    Binary.MUL: lambda a, b: a * b,
    Binary.DIV: lambda a, b: a / b,
    Binary.POW: np.power,
}

_BACKWARD = {
    Binary.ADD: lambda a, b, c: (1.0, 1.0),
    Binary.SUB: lambda a, b, c: (1.0, -1.0),
    Binary.MUL: lambda a, b, c: (b, a),
    Binary.DIV: _div_partials,
    Binary.POW: _pow_partials,
}
