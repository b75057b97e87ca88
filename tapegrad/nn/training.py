# tapegrad/nn/training.py
"""
Minibatch gradient descent over a fixed graph.

The graph is built once; every example reuses the same `Values` buffer and
the same two `Gradients` buffers. The backward pass is seeded with the
learning rate, so the per-example gradients are already scaled steps and
the accumulated batch gradient is subtracted from the parameters directly.

    sgd = MinibatchSGD(ops, loss, [a, b], TrainingConfig(learning_rate=0.005))
    history = sgd.fit(values, batches, bind)

`bind(values, example)` writes one example into the input leaves.
"""

from __future__ import annotations
import warnings
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from ..core.buffers import Gradients, Values
from ..core.engine import backward, forward
from ..core.node import NodeId

Binder = Callable[[Values, object], None]


@dataclass
class TrainingConfig:
    """Configuration for minibatch gradient descent."""
    learning_rate: float = 0.005
    epochs: int = 50

    # Logging
    verbose: bool = False
    log_every: int = 10  # epochs between progress lines when verbose


class MinibatchSGD:
    """
    Plain SGD on the leaves in `parameters`, minimising node `loss`.

    Attributes:
        gradients (Gradients): Scratch buffer for one example's backward pass
        accumulated (Gradients): Sum over the current batch
    """

    def __init__(self, ops, loss: NodeId, parameters: Iterable[NodeId],
                 config: Optional[TrainingConfig] = None):
        self.ops = ops
        self.loss = loss
        self.parameters = list(parameters)
        self.config = config or TrainingConfig()
        ops.check_node(loss)
        for p in self.parameters:
            ops.check_node(p)
        self.gradients = Gradients(len(ops))
        self.accumulated = Gradients(len(ops))

    def step(self, values: Values, batch: Sequence, bind: Binder) -> float:
        """One update from one batch; returns the mean loss before the update."""
        self.accumulated.fill(0.0)
        total = 0.0
        for example in batch:
            bind(values, example)
            forward(self.ops, values)
            backward(self.ops, values, self.gradients, self.loss, self.config.learning_rate)
            self.accumulated.accumulate(self.gradients)
            total += values[self.loss]

        for p in self.parameters:
            values[p] -= self.accumulated[p]
        return total / max(len(batch), 1)

    def fit(self, values: Values, batches: Sequence[Sequence], bind: Binder) -> List[float]:
        """Run `config.epochs` passes over `batches`; returns mean loss per epoch."""
        history: List[float] = []
        for epoch in range(self.config.epochs):
            losses = [self.step(values, batch, bind) for batch in batches]
            epoch_loss = float(np.mean(losses)) if losses else 0.0
            history.append(epoch_loss)

            if not np.isfinite(epoch_loss):
                warnings.warn(
                    f"Loss became non-finite ({epoch_loss}) at epoch {epoch + 1}; "
                    f"consider a smaller learning rate",
                    RuntimeWarning,
                    stacklevel=2,
                )
            if self.config.verbose and (
                (epoch + 1) % self.config.log_every == 0 or epoch + 1 == self.config.epochs
            ):
                print(f"  epoch {epoch + 1:4d}/{self.config.epochs}: loss = {epoch_loss:.6f}")
        return history
