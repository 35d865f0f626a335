"""Activation utilities for mlpnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np

from .types import Array

ActivationFn = Callable[[Array], Array]


@dataclass(frozen=True)
class Activation:
    """Pointwise activation paired with its exact derivative."""

    name: str
    activate: ActivationFn
    differentiate: ActivationFn


def identity(x: Array) -> Array:
    return x


def identity_deriv(x: Array) -> Array:
    return np.ones_like(x)


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def relu_deriv(x: Array) -> Array:
    return (x > 0).astype(x.dtype)


def tanh(x: Array) -> Array:
    return np.tanh(x)


def tanh_deriv(x: Array) -> Array:
    return 1.0 - np.tanh(x) ** 2


def sigmoid(x: Array) -> Array:
    return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(x: Array) -> Array:
    s = sigmoid(x)
    return s * (1.0 - s)


IDENTITY = Activation("identity", identity, identity_deriv)
RELU = Activation("relu", relu, relu_deriv)
TANH = Activation("tanh", tanh, tanh_deriv)
SIGMOID = Activation("sigmoid", sigmoid, sigmoid_deriv)

_REGISTRY: Dict[str, Activation] = {
    act.name: act for act in (IDENTITY, RELU, TANH, SIGMOID)
}
# "plain" is the name used for identity layers in presets
_REGISTRY["plain"] = IDENTITY


def get_activation(name: str | Activation) -> Activation:
    """Resolve ``name`` to a registered :class:`Activation`."""

    if isinstance(name, Activation):
        return name
    try:
        return _REGISTRY[name]
    except KeyError as exc:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown activation {name!r}. Available: {available}") from exc


__all__ = [
    "Activation",
    "IDENTITY",
    "RELU",
    "TANH",
    "SIGMOID",
    "get_activation",
    "relu",
    "tanh",
    "sigmoid",
]
