# tapegrad/ops/__init__.py

# Operator semantics: forward values and local partials per primitive.
# Expression constructors (exp, tanh, ...) live in `tapegrad.ops.functional`
# and are re-exported from the top-level package.
from .unary import Unary
from .binary import Binary

__all__ = ["Unary", "Binary"]
