"""Feed-forward network orchestrating a stack of layers."""

from __future__ import annotations

import warnings
from typing import List, Sequence

import numpy as np

from .layers import Layer
from .losses import Evaluator, SoftmaxCrossEntropy
from .parallel import row_argmax
from .types import Array, ForwardRecord, GradientRecord, LossRecord


class Network:
    """Ordered hidden layers plus one output layer, trained by gradient descent.

    The output layer is held by reference: the network never copies it and
    mutates its weights during :meth:`train`. Callers keep ownership and must
    not also push it as a hidden layer.

    Parameters
    ----------
    inputs:
        Default ``N x D`` training inputs used by :meth:`train` when no batch
        is supplied.
    one_hot_labels:
        Default ``N x C`` boolean one-hot labels matching ``inputs``.
    output_layer:
        Layer that receives the evaluator's gradient through ``seed_back_prop``.
    evaluator:
        Loss evaluator; defaults to :class:`SoftmaxCrossEntropy`.
    """

    def __init__(
        self,
        inputs: Array,
        one_hot_labels: Array,
        output_layer: Layer,
        evaluator: Evaluator | None = None,
    ) -> None:
        self.inputs = np.asarray(inputs, dtype=np.float64)
        self.one_hot_labels = np.asarray(one_hot_labels, dtype=bool)
        if self.inputs.shape[0] != self.one_hot_labels.shape[0]:
            raise ValueError(
                f"inputs have {self.inputs.shape[0]} rows but labels have "
                f"{self.one_hot_labels.shape[0]}"
            )
        self._output_layer = output_layer
        self._hidden: List[Layer] = []
        self.evaluator: Evaluator = evaluator if evaluator is not None else SoftmaxCrossEntropy()
        self.loss: LossRecord | None = None

    # ------------------------------------------------------------------
    # Layer stack

    @property
    def output_layer(self) -> Layer:
        return self._output_layer

    @property
    def hidden_layers(self) -> tuple[Layer, ...]:
        return tuple(self._hidden)

    @property
    def layers(self) -> tuple[Layer, ...]:
        """Hidden layers in forward order followed by the output layer."""

        return (*self._hidden, self._output_layer)

    def push_layer(self, layer: Layer) -> None:
        if layer is self._output_layer:
            raise ValueError("the output layer cannot also be pushed as a hidden layer")
        self._hidden.append(layer)

    def pop_layer(self) -> Layer:
        if not self._hidden:
            raise IndexError("pop_layer called on a network without hidden layers")
        return self._hidden.pop()

    # ------------------------------------------------------------------
    # Entry points

    def train(
        self,
        lr: float,
        inputs: Array | None = None,
        one_hot_labels: Array | None = None,
    ) -> LossRecord:
        """Run one forward, backward and update pass; return the evaluator's pair.

        Without ``inputs`` and ``one_hot_labels`` the defaults given at
        construction are used.
        """

        if not lr >= 0:
            raise ValueError(f"learning rate must be a non-negative number, got lr={lr}")
        inputs, one_hot_labels = self._resolve_batch(inputs, one_hot_labels)

        records = self.forward(inputs)
        loss, pre_gradient = self.evaluator.evaluate(records[-1].outputs, one_hot_labels)
        self.loss = loss

        gradients = self.backward(records, pre_gradient)
        self._update(inputs, records, gradients, lr)
        return loss

    def test(self, inputs: Array, one_hot_labels: Array) -> LossRecord:
        """Evaluate the network on a batch without touching weights or ``loss``."""

        records = self.forward(inputs)
        loss, _ = self.evaluator.evaluate(records[-1].outputs, one_hot_labels)
        return loss

    def predict(self, inputs: Array) -> Array:
        """Return the ``N x 1`` arg-max class index of the final outputs."""

        return row_argmax(self.forward(inputs)[-1].outputs)

    # ------------------------------------------------------------------
    # Passes

    def forward(self, inputs: Array) -> List[ForwardRecord]:
        """Return one record per layer in forward order, output layer last."""

        records: List[ForwardRecord] = []
        layer_inputs = inputs
        for layer in self.layers:
            record = layer.forward(layer_inputs)
            records.append(record)
            layer_inputs = record.outputs
        return records

    def backward(
        self, records: Sequence[ForwardRecord], pre_gradient: Array
    ) -> List[GradientRecord]:
        """Return one gradient record per layer, aligned with ``records``."""

        layers = self.layers
        gradients: List[GradientRecord | None] = [None] * len(layers)
        last = len(layers) - 1
        current = layers[last].seed_back_prop(records[last].signals, pre_gradient)
        gradients[last] = current
        for idx in reversed(range(last)):
            current = layers[idx].back_propagate(
                records[idx].signals, current.transformed_gradient
            )
            gradients[idx] = current
        return gradients  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Helpers

    def _update(
        self,
        inputs: Array,
        records: Sequence[ForwardRecord],
        gradients: Sequence[GradientRecord],
        lr: float,
    ) -> None:
        for idx, layer in enumerate(self.layers):
            layer_inputs = inputs if idx == 0 else records[idx - 1].outputs
            layer.update_weights(layer_inputs, gradients[idx].gradient, lr)

    def _resolve_batch(
        self, inputs: Array | None, one_hot_labels: Array | None
    ) -> tuple[Array, Array]:
        if inputs is None and one_hot_labels is None:
            if self.inputs.shape[0] == 0:
                warnings.warn(
                    "training on an empty default batch leaves every weight unchanged",
                    RuntimeWarning,
                    stacklevel=3,
                )
            return self.inputs, self.one_hot_labels
        if inputs is None or one_hot_labels is None:
            raise TypeError("train() needs both inputs and one_hot_labels, or neither")
        return inputs, one_hot_labels


__all__ = ["Network"]
