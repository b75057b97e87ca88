# tapegrad/ops/functional.py

# Expression constructors, so users can write: from tapegrad import exp, tanh
from ..core.expr import UnaryExpr, BinaryExpr
from .unary import Unary
from .binary import Binary


def neg(x):   return UnaryExpr(Unary.NEG, x)
def recip(x): return UnaryExpr(Unary.RECIP, x)
def pow2(x):  return UnaryExpr(Unary.POW2, x)
def ln(x):    return UnaryExpr(Unary.LN, x)
def ln1p(x):  return UnaryExpr(Unary.LN1P, x)
def exp(x):   return UnaryExpr(Unary.EXP, x)
def exp2(x):  return UnaryExpr(Unary.EXP2, x)
def expm1(x): return UnaryExpr(Unary.EXPM1, x)
def tanh(x):  return UnaryExpr(Unary.TANH, x)

def add(x, y): return BinaryExpr(Binary.ADD, x, y)
def sub(x, y): return BinaryExpr(Binary.SUB, x, y)
def mul(x, y): return BinaryExpr(Binary.MUL, x, y)
def div(x, y): return BinaryExpr(Binary.DIV, x, y)
def pow(x, y): return BinaryExpr(Binary.POW, x, y)


__all__ = [
    "neg", "recip", "pow2", "ln", "ln1p", "exp", "exp2", "expm1", "tanh",
    "add", "sub", "mul", "div", "pow",
]
