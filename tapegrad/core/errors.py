# tapegrad/core/errors.py
"""
Exception types raised by the graph, the buffers and the evaluators.

Structural misuse (a NodeId from another graph, a buffer sized for a
different graph) is a programming error and is always checked. Numeric edge
cases are never trapped; they propagate as IEEE-754 inf/NaN.
"""


class TapegradError(Exception):
    """Base class for all errors raised by tapegrad."""


class GraphReferenceError(TapegradError, IndexError):
    """A NodeId does not belong to the graph it was used with."""


class BufferLengthError(TapegradError, ValueError):
    """A Values/Gradients buffer does not match the graph length."""


class SerializationError(TapegradError, ValueError):
    """Persisted parameters do not match the layer(s) they are loaded into."""
