"""Command line entry point for mlpnet training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from mlpnet.data import available_datasets
from mlpnet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "test_loss": result.test_loss,
        "test_misclassification": result.test_misclassification,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="iris-plain",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config override"
    )
    parser.add_argument(
        "--dataset",
        choices=list(available_datasets()),
        help="Override the dataset used by the run",
    )
    parser.add_argument(
        "--data-dir",
        help="Directory holding iris_training.dat, iris_validation.dat and iris_test.dat",
    )
    parser.add_argument("--csv-path", help="Path to a CSV file for csv_classification")
    parser.add_argument("--target-col", help="Target column name for CSV datasets")
    parser.add_argument("--seed", type=int, help="Seed used for dataset splits and weights")
    parser.add_argument("--lr", type=float, help="Initial learning rate")
    parser.add_argument("--max-epochs", type=int, help="Upper bound on training epochs")
    parser.add_argument("--run-dir", help="Directory receiving run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write loss.png into the run directory"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> dict:
    config = pipelines.load_preset(args.preset)

    if args.config:
        override = pipelines.read_config_file(args.config)
        if pipelines.REQUIRED_SECTIONS <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    if args.dataset:
        config["data"] = {"name": args.dataset, "options": {}}
    opts = config.setdefault("data", {}).setdefault("options", {})
    if args.data_dir:
        opts["data_dir"] = args.data_dir
    if args.csv_path:
        opts["csv_path"] = args.csv_path
    if args.target_col:
        opts["target_col"] = args.target_col

    if args.seed is not None:
        opts["seed"] = int(args.seed)
        config.setdefault("model", {})["seed"] = int(args.seed)
    train_cfg = config.setdefault("train", {})
    if args.lr is not None:
        train_cfg["lr"] = float(args.lr)
    if args.max_epochs is not None:
        train_cfg["max_epochs"] = int(args.max_epochs)
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
