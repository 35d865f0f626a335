"""mlpnet public API."""

from .core import activations, labels, types  # noqa: F401
from .core.layers import Layer, LinearLayer, PlainLinearLayer
from .core.losses import MeanSquaredError, SoftmaxCrossEntropy
from .core.network import Network
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__version__ = "0.1.0"

__all__ = [
    "Layer",
    "LinearLayer",
    "MeanSquaredError",
    "Network",
    "PlainLinearLayer",
    "SoftmaxCrossEntropy",
    "Trainer",
    "activations",
    "labels",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]
