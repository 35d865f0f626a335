"""Loss evaluators that seed backpropagation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Protocol

import numpy as np

from .labels import to_index_labels
from .parallel import row_argmax
from .types import Array, LossRecord


class Evaluator(Protocol):
    """Turn final-layer outputs and one-hot labels into metrics and a gradient.

    The returned gradient is taken w.r.t. ``outputs``; the output layer's
    ``seed_back_prop`` applies its own activation derivative on top.
    """

    def evaluate(self, outputs: Array, one_hot_labels: Array) -> tuple[LossRecord, Array]:
        ...


def softmax(x: Array, axis: int | None = 1) -> Array:
    """Exponentiate ``x`` and normalise along ``axis`` (``None`` for the whole matrix).

    No max-subtraction is applied, so very large inputs overflow to ``inf``.
    """

    raised = np.exp(np.asarray(x, dtype=np.float64))
    if axis is None:
        return raised / raised.sum()
    return raised / raised.sum(axis=axis, keepdims=True)


def misclassification_rate(
    scores: Array, one_hot_labels: Array, *, max_workers: int | None = None
) -> float:
    """Fraction of rows whose arg-max differs from the true class."""

    predicted = row_argmax(scores, max_workers=max_workers)
    expected = to_index_labels(one_hot_labels)
    return float(np.mean(predicted != expected))


@dataclass(frozen=True)
class SoftmaxCrossEntropy:
    """Categorical cross-entropy on row-wise softmax of the outputs."""

    max_workers: int | None = None
    name: str = "softmax_ce"

    def evaluate(self, outputs: Array, one_hot_labels: Array) -> tuple[LossRecord, Array]:
        labels = np.asarray(one_hot_labels, dtype=np.float64)
        num_rows = labels.shape[0]
        probs = softmax(outputs, axis=1)

        true_probs = np.sum(probs * labels, axis=1)
        cross_entropy = float(-np.sum(np.log(true_probs)) / num_rows)
        misclas = misclassification_rate(probs, one_hot_labels, max_workers=self.max_workers)

        gradient = (probs - labels) / num_rows
        return LossRecord(cross_entropy, misclas), gradient


@dataclass(frozen=True)
class MeanSquaredError:
    """Squared error between raw outputs and one-hot targets, summed per row."""

    max_workers: int | None = None
    name: str = "mse"

    def evaluate(self, outputs: Array, one_hot_labels: Array) -> tuple[LossRecord, Array]:
        labels = np.asarray(one_hot_labels, dtype=np.float64)
        num_rows = labels.shape[0]
        diff = np.asarray(outputs, dtype=np.float64) - labels
        loss = float(np.sum(diff**2) / num_rows)
        misclas = misclassification_rate(outputs, one_hot_labels, max_workers=self.max_workers)
        return LossRecord(loss, misclas), 2.0 * diff / num_rows


EvaluatorFactory = Callable[..., Evaluator]


class LossRegistry:
    """Central registry for loss evaluators."""

    def __init__(self) -> None:
        self._registry: Dict[str, EvaluatorFactory] = {}

    def register(self, name: str, factory: EvaluatorFactory) -> None:
        self._registry[name] = factory

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def resolve(self, name: str, **options: object) -> Evaluator:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown loss {name!r}. Available losses: {available}")
        return self._registry[name](**options)


REGISTRY = LossRegistry()
REGISTRY.register("softmax_ce", SoftmaxCrossEntropy)
REGISTRY.register("ce", SoftmaxCrossEntropy)
REGISTRY.register("mse", MeanSquaredError)

__all__ = [
    "Evaluator",
    "LossRegistry",
    "MeanSquaredError",
    "REGISTRY",
    "SoftmaxCrossEntropy",
    "misclassification_rate",
    "softmax",
]
