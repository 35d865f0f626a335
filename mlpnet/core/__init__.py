"""Core numerical primitives for mlpnet."""

from . import activations, labels, layers, losses, network, parallel, types

__all__ = ["activations", "labels", "layers", "losses", "network", "parallel", "types"]
