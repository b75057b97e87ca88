# tapegrad/ops/unary.py
import numpy as np
from enum import Enum

LN_2 = np.log(2.0)


class Unary(Enum):
    """
    Elementwise unary primitives b = f(a).

    The enum value is the display symbol used by graph summaries and DOT
    export. `backward(a, b)` returns the local partial db/da; it may read the
    forward output `b` instead of recomputing it.
    """
    NEG = "-"
    RECIP = "1/x"
    POW2 = "x²"
    LN = "ln"
    LN1P = "ln(1+x)"
    EXP = "exp"
    EXP2 = "2^x"
    EXPM1 = "exp(x)-1"
    TANH = "tanh"

    @property
    def symbol(self) -> str:
        return self.value

    def forward(self, a):
        return _FORWARD[self](np.float64(a))

    def backward(self, a, b):
        return np.float64(_BACKWARD[self](np.float64(a), np.float64(b)))


_FORWARD = {
    Unary.NEG:   np.negative,
    Unary.RECIP: np.reciprocal,
    Unary.POW2:  np.square,
    Unary.LN:    np.log,
    Unary.LN1P:  np.log1p,
    Unary.EXP:   np.exp,
    Unary.EXP2:  np.exp2,
    Unary.EXPM1: np.expm1,
    Unary.TANH:  np.tanh,
}

_BACKWARD = {
    Unary.NEG:   lambda a, b: -1.0,
    Unary.RECIP: lambda a, b: -np.square(b),
    Unary.POW2:  lambda a, b: 2.0 * a,
    Unary.LN:    lambda a, b: 1.0 / a,
    Unary.LN1P:  lambda a, b: 1.0 / (1.0 + a),
    Unary.EXP:   lambda a, b: b,
    Unary.EXP2:  lambda a, b: LN_2 * b,
    Unary.EXPM1: lambda a, b: np.exp(a),   # or b + 1
    Unary.TANH:  lambda a, b: 1.0 - np.square(b),
}
