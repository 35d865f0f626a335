"""Pipeline assembly: config presets, network construction and run artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import yaml

from ..core.layers import LinearLayer
from ..core.losses import REGISTRY as LOSS_REGISTRY
from ..core.network import Network
from ..core.types import Batch, RunResult
from ..data import registry
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import Trainer, build_early_stopping, build_schedule

_PRESETS: Dict[str, Mapping[str, object]] = {
    "iris-plain": {
        "data": {
            "name": "iris",
            "options": {"seed": 0, "val_split": 0.2, "test_split": 0.2},
        },
        "model": {
            "hidden": [4],
            "activation": "identity",
            "output_activation": "identity",
            "max_weight": 1.0,
            "seed": 42,
            "loss": "softmax_ce",
        },
        "train": {
            "lr": 0.1,
            "schedule": "inverse_time",
            "decay_rate": 0.1,
            "early_stopping": {"patience": 3, "mode": "cumulative"},
            "max_epochs": 1000,
            "run_dir": "runs/iris-plain",
            "enable_plots": False,
        },
    },
    "iris-tanh": {
        "data": {
            "name": "iris",
            "options": {
                "seed": 0,
                "val_split": 0.2,
                "test_split": 0.2,
                "standardize_inputs": True,
            },
        },
        "model": {
            "hidden": [8],
            "activation": "tanh",
            "output_activation": "identity",
            "max_weight": 0.5,
            "seed": 7,
            "loss": "softmax_ce",
        },
        "train": {
            "lr": 0.5,
            "schedule": "inverse_time",
            "decay_rate": 0.01,
            "early_stopping": {"patience": 10, "mode": "consecutive"},
            "max_epochs": 500,
            "run_dir": "runs/iris-tanh",
            "enable_plots": False,
        },
    },
    "blobs-min": {
        "data": {
            "name": "blobs",
            "options": {"n_classes": 3, "n_features": 2, "samples_per_class": 30, "seed": 0},
        },
        "model": {
            "hidden": [8],
            "activation": "tanh",
            "output_activation": "identity",
            "max_weight": 0.5,
            "seed": 3,
            "loss": "softmax_ce",
        },
        "train": {
            "lr": 0.5,
            "schedule": "constant",
            "early_stopping": {"patience": 5, "mode": "consecutive"},
            "max_epochs": 60,
            "run_dir": "runs/blobs-min",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
REQUIRED_SECTIONS = {"data", "model", "train"}


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Decode a JSON or YAML config file into a mapping."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    found: Dict[str, Mapping[str, object]] = {}
    if not _PRESET_DIR.exists():
        return found
    for file in sorted(_PRESET_DIR.iterdir()):
        if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
            continue
        data = read_config_file(file)
        missing = REQUIRED_SECTIONS - set(data)
        if missing:
            missing_str = ", ".join(sorted(missing))
            raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
        found[file.stem] = json.loads(json.dumps(data))
    return found


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {
        name: deepcopy(cfg) for name, cfg in _PRESETS.items()
    }
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Dict[str, object]:
    available = presets()
    if name not in available:
        raise KeyError(f"Unknown preset: {name}")
    return json.loads(json.dumps(available[name]))


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> Dict[str, object]:
    """Recursively merge ``override`` into a copy of ``base``."""

    merged: Dict[str, object] = deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def build_dims(model_cfg: Mapping[str, object], batch: Batch) -> List[int]:
    """Return ``[d_in, *hidden, d_out]`` checked against ``batch``."""

    observed_in = int(batch.inputs.shape[1])
    observed_out = int(batch.targets.shape[1])
    d_in = int(model_cfg.get("d_in", observed_in))
    d_out = int(model_cfg.get("d_out", observed_out))
    if d_in != observed_in:
        raise ValueError(f"Configured d_in={d_in} but observed batch has {observed_in}")
    if d_out != observed_out:
        raise ValueError(f"Configured d_out={d_out} but observed batch has {observed_out}")
    dims = [d_in]
    dims.extend(int(h) for h in model_cfg.get("hidden", []))  # type: ignore[union-attr]
    dims.append(d_out)
    return dims


def build_network(model_cfg: Mapping[str, object], batch: Batch) -> Network:
    """Construct the layers described by ``model_cfg`` around the default ``batch``.

    Layer ``i`` (forward order, output layer last) is seeded with ``seed + i``.
    """

    dims = build_dims(model_cfg, batch)
    seed = int(model_cfg.get("seed", 42))
    max_weight = float(model_cfg.get("max_weight", 1.0))
    hidden_activation = str(model_cfg.get("activation", "identity"))
    output_activation = str(model_cfg.get("output_activation", "identity"))

    layers = [
        LinearLayer(
            in_dim,
            out_dim,
            max_weight=max_weight,
            seed=seed + idx,
            activation=output_activation if idx == len(dims) - 2 else hidden_activation,
        )
        for idx, (in_dim, out_dim) in enumerate(zip(dims[:-1], dims[1:]))
    ]
    evaluator = LOSS_REGISTRY.resolve(str(model_cfg.get("loss", "softmax_ce")))
    network = Network(batch.inputs, batch.targets, layers[-1], evaluator=evaluator)
    for layer in layers[:-1]:
        network.push_layer(layer)
    return network


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))
    train_batch = dataset.split("train")
    val_batch = dataset.split("val")
    test_batch = dataset.split("test")
    if len(val_batch) == 0:
        raise ValueError("A non-empty validation split is required for early stopping")

    network = build_network(model_cfg, train_batch)
    dims = build_dims(model_cfg, train_batch)
    seed = int(model_cfg.get("seed", 42))

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        sizes=dataset.sizes,
        dims=dims,
        activation=str(model_cfg.get("activation", "identity")),
        loss=str(model_cfg.get("loss", "softmax_ce")),
        schedule=str(train_cfg.get("schedule", "inverse_time")),
        param_count=sum(layer.weights.size for layer in network.layers),
    )

    sinks = {
        split: (
            JsonlSink(run_dir / f"metrics_{split}.jsonl", split=split, seed=seed),
            CsvSink(run_dir / f"metrics_{split}.csv", split=split),
        )
        for split in ("train", "val", "test")
    }
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    split_loggers = {
        split: [*split_sinks, plots.logger(split)] for split, split_sinks in sinks.items()
    }

    trainer = Trainer(
        network,
        build_schedule(train_cfg),
        early_stopping=build_early_stopping(train_cfg.get("early_stopping")),  # type: ignore[arg-type]
    )
    result = trainer.run(
        val=val_batch,
        test=test_batch,
        max_epochs=int(train_cfg.get("max_epochs", 1000)),
        split_loggers=split_loggers,
    )
    plots.close()

    (run_dir / "metrics_test.json").write_text(json.dumps(result.test_metrics, indent=2))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=_safe_config(config, dims),
        dataset_provenance=dataset.provenance,
    )
    train_jsonl = sinks["train"][0].path
    summary_path = write_summary(
        sinks["val"][0].path,
        run_dir / "summary.json",
        tail=int(train_cfg.get("summary_tail", 32)),
    )
    (run_dir / "config.json").write_text(json.dumps(_safe_config(config, dims), indent=2))
    (run_dir / "metrics.jsonl").write_text(train_jsonl.read_text())

    return RunResult(
        epochs=result.epochs,
        test_loss=float(result.test_metrics.get("loss", float("nan"))),
        test_misclassification=float(result.test_metrics.get("misclassification", float("nan"))),
        metrics_path=str(train_jsonl),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _safe_config(config: Mapping[str, object], dims: Sequence[int]) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied.setdefault("model", {})["dims"] = list(dims)
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    sizes: Mapping[str, int],
    dims: Sequence[int],
    activation: str,
    loss: str,
    schedule: str,
    param_count: int,
) -> None:
    print("=== mlpnet run ===")
    print(f"Dataset       : {dataset_name} {dict(sizes)}")
    print(f"Dimensions    : {list(dims)}")
    print(f"Activation    : {activation}")
    print(f"Loss          : {loss}")
    print(f"LR schedule   : {schedule}")
    print(f"Parameters    : {param_count}")
    print("==================")


__all__ = [
    "build_dims",
    "build_network",
    "load_preset",
    "merge_config",
    "presets",
    "read_config_file",
    "run_pipeline",
]
