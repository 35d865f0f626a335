"""Epoch loop driving a :class:`~mlpnet.core.network.Network`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Protocol, Sequence

from ..core.network import Network
from ..core.types import Batch, LossRecord


class LearningRateSchedule(Protocol):
    def __call__(self, epoch: int) -> float:
        """Return the learning rate for zero-based ``epoch``."""


@dataclass(frozen=True)
class ConstantSchedule:
    lr: float

    def __call__(self, epoch: int) -> float:
        return self.lr


@dataclass(frozen=True)
class InverseTimeDecay:
    """``lr / (1 + epoch * decay_rate)``."""

    lr: float
    decay_rate: float = 0.1

    def __call__(self, epoch: int) -> float:
        return self.lr / (1.0 + epoch * self.decay_rate)


_SCHEDULES: Dict[str, Callable[[Mapping[str, object]], LearningRateSchedule]] = {
    "constant": lambda cfg: ConstantSchedule(lr=float(cfg.get("lr", 0.1))),
    "inverse_time": lambda cfg: InverseTimeDecay(
        lr=float(cfg.get("lr", 0.1)), decay_rate=float(cfg.get("decay_rate", 0.1))
    ),
}


def build_schedule(train_cfg: Mapping[str, object]) -> LearningRateSchedule:
    """Build the schedule named by ``train_cfg["schedule"]``."""

    name = str(train_cfg.get("schedule", "inverse_time"))
    if name not in _SCHEDULES:
        available = ", ".join(sorted(_SCHEDULES))
        raise KeyError(f"Unknown schedule {name!r}. Available schedules: {available}")
    return _SCHEDULES[name](train_cfg)


class EarlyStopping:
    """Stop once validation loss fails to improve ``patience`` times.

    ``mode="consecutive"`` resets the count whenever the loss drops below the
    previous epoch's; ``mode="cumulative"`` never resets it.
    """

    MODES = ("consecutive", "cumulative")

    def __init__(self, patience: int = 3, mode: str = "consecutive") -> None:
        if patience < 1:
            raise ValueError("patience must be >= 1")
        if mode not in self.MODES:
            raise ValueError(f"mode must be one of {self.MODES}, got {mode!r}")
        self.patience = patience
        self.mode = mode
        self.reset()

    def reset(self) -> None:
        """Forget the violation count and the last seen validation loss."""

        self.violations = 0
        self._previous = float("inf")

    def step(self, val_loss: float) -> bool:
        """Record ``val_loss``; return ``True`` when training should stop."""

        # NaN never counts as an improvement
        if not val_loss < self._previous:
            self.violations += 1
        elif self.mode == "consecutive":
            self.violations = 0
        self._previous = val_loss
        return self.violations >= self.patience


def build_early_stopping(cfg: Mapping[str, object] | None) -> EarlyStopping | None:
    if not cfg:
        return None
    return EarlyStopping(
        patience=int(cfg.get("patience", 3)), mode=str(cfg.get("mode", "consecutive"))
    )


@dataclass
class TrainingResult:
    """Outcome of :meth:`Trainer.run`."""

    epochs: int
    stopped_early: bool
    history: List[Dict[str, Dict[str, float]]] = field(default_factory=list)
    test_metrics: Dict[str, float] = field(default_factory=dict)


def _as_metrics(record: LossRecord, lr: float | None = None) -> Dict[str, float]:
    metrics = {"loss": float(record.loss), "misclassification": float(record.misclassification)}
    if lr is not None:
        metrics["lr"] = float(lr)
    return metrics


class Trainer:
    """Train a network epoch by epoch with validation-based early stopping."""

    def __init__(
        self,
        network: Network,
        schedule: LearningRateSchedule,
        early_stopping: EarlyStopping | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.network = network
        self.schedule = schedule
        self.early_stopping = early_stopping
        self.callbacks = list(callbacks or [])

    def run(
        self,
        *,
        val: Batch,
        test: Batch | None = None,
        train: Batch | None = None,
        max_epochs: int = 1000,
        split_loggers: Mapping[str, Sequence[object]] | None = None,
    ) -> TrainingResult:
        """Train until early stopping triggers or ``max_epochs`` is reached.

        Without ``train`` the network's default batch is used every epoch.
        """

        if max_epochs < 1:
            raise ValueError("max_epochs must be >= 1")
        split_loggers = split_loggers or {}
        if self.early_stopping is not None:
            self.early_stopping.reset()
        result = TrainingResult(epochs=0, stopped_early=False)

        for epoch in range(max_epochs):
            lr = self.schedule(epoch)
            if train is None:
                train_loss = self.network.train(lr)
            else:
                train_loss = self.network.train(lr, train.inputs, train.targets)
            val_loss = self.network.test(val.inputs, val.targets)

            entry = {
                "train": _as_metrics(train_loss, lr),
                "val": _as_metrics(val_loss, lr),
            }
            result.history.append(entry)
            result.epochs = epoch + 1
            for split, metrics in entry.items():
                self._emit_epoch(split, epoch + 1, metrics, split_loggers)

            if self.early_stopping is not None and self.early_stopping.step(val_loss.loss):
                result.stopped_early = True
                break

        if test is not None and len(test) > 0:
            result.test_metrics = _as_metrics(self.network.test(test.inputs, test.targets))
            self._emit_epoch("test", result.epochs, result.test_metrics, split_loggers)
        return result

    def _emit_epoch(
        self,
        split: str,
        epoch: int,
        metrics: Mapping[str, float],
        loggers: Mapping[str, Sequence[object]],
    ) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
        for callback in loggers.get(split, []):
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = [
    "ConstantSchedule",
    "EarlyStopping",
    "InverseTimeDecay",
    "Trainer",
    "TrainingResult",
    "build_early_stopping",
    "build_schedule",
]
