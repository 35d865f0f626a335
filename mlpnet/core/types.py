"""Core typing contracts for mlpnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class Batch:
    """A full split of data: float inputs and boolean one-hot targets."""

    inputs: Array
    targets: Array

    def __len__(self) -> int:
        return int(self.inputs.shape[0])


class ForwardRecord(NamedTuple):
    """Pre-activation signals and post-activation outputs of one layer."""

    signals: Array
    outputs: Array


class GradientRecord(NamedTuple):
    """Gradient w.r.t. a layer's signals and the gradient passed to its inputs."""

    gradient: Array
    transformed_gradient: Array


class LossRecord(NamedTuple):
    """Scalar loss and misclassification rate produced by an evaluator."""

    loss: float
    misclassification: float


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`mlpnet.training.pipelines.run_pipeline`."""

    epochs: int
    test_loss: float
    test_misclassification: float
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
