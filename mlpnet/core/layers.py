"""Linear layers with a bias row and a pluggable pointwise activation."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from .activations import IDENTITY, Activation, get_activation
from .types import Array, ForwardRecord, GradientRecord


class Layer(Protocol):
    """Protocol implemented by every layer a :class:`~mlpnet.core.network.Network` drives."""

    weights: Array

    def forward(self, inputs: Array) -> ForwardRecord:
        """Return the signals and activated outputs for ``inputs``."""

    def back_propagate(self, signals: Array, transformed_gradient: Array) -> GradientRecord:
        """Propagate the gradient arriving from the next layer (hidden layers)."""

    def seed_back_prop(self, signals: Array, loss_gradient: Array) -> GradientRecord:
        """Start backpropagation from the evaluator's gradient (output layer)."""

    def update_weights(self, inputs: Array, gradient: Array, lr: float) -> None:
        """Apply one gradient-descent step in place."""


def augment_ones(inputs: Array) -> Array:
    """Append a constant-one bias column to ``inputs``."""

    inputs = np.asarray(inputs, dtype=np.float64)
    ones = np.ones((inputs.shape[0], 1), dtype=np.float64)
    return np.hstack([inputs, ones])


class LinearLayer:
    """Affine transform followed by a pointwise activation.

    The weight matrix has shape ``(in_dim + 1, out_dim)``; its last row is the
    bias, matched by the ones column :func:`augment_ones` appends to every
    input batch. Weights start uniform in ``[-max_weight, max_weight]`` and are
    drawn from ``rng`` or, when it is omitted, from a generator seeded with
    ``seed``.
    """

    def __init__(
        self,
        in_dim: int,
        out_dim: int,
        max_weight: float = 1.0,
        seed: int = 42,
        activation: Activation | str = IDENTITY,
        rng: np.random.Generator | None = None,
    ) -> None:
        if in_dim <= 0 or out_dim <= 0:
            raise ValueError(f"layer dimensions must be positive, got {in_dim}x{out_dim}")
        self.in_dim = int(in_dim)
        self.out_dim = int(out_dim)
        self.max_weight = float(max_weight)
        self.activation = get_activation(activation)
        rng = rng if rng is not None else np.random.default_rng(seed)
        self.weights = rng.uniform(
            -self.max_weight, self.max_weight, size=(self.in_dim + 1, self.out_dim)
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(in_dim={self.in_dim}, out_dim={self.out_dim}, "
            f"activation={self.activation.name!r})"
        )

    def forward(self, inputs: Array) -> ForwardRecord:
        signals = augment_ones(inputs) @ self.weights
        outputs = self.activation.activate(signals)
        return ForwardRecord(signals=signals, outputs=outputs)

    def back_propagate(self, signals: Array, transformed_gradient: Array) -> GradientRecord:
        gradient = self.activation.differentiate(signals) * transformed_gradient
        return GradientRecord(gradient, self._transform_gradient(gradient))

    def seed_back_prop(self, signals: Array, loss_gradient: Array) -> GradientRecord:
        # the evaluator's gradient is taken w.r.t. this layer's outputs
        gradient = self.activation.differentiate(signals) * loss_gradient
        return GradientRecord(gradient, self._transform_gradient(gradient))

    def update_weights(self, inputs: Array, gradient: Array, lr: float) -> None:
        step = lr * (augment_ones(inputs).T @ gradient)
        self.weights -= step

    def _transform_gradient(self, gradient: Array) -> Array:
        return gradient @ self.weights[:-1].T


class PlainLinearLayer(LinearLayer):
    """Linear layer without activation (``activate(x) = x``, ``differentiate(x) = 1``)."""

    def __init__(
        self,
        in_dim: int,
        out_dim: int,
        max_weight: float = 1.0,
        seed: int = 42,
        rng: np.random.Generator | None = None,
    ) -> None:
        super().__init__(in_dim, out_dim, max_weight, seed, activation=IDENTITY, rng=rng)


__all__ = ["Layer", "LinearLayer", "PlainLinearLayer", "augment_ones"]
