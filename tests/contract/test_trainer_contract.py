import csv
import json
from pathlib import Path

from mlpnet.reporting.metrics import CSV_FIELDS
from mlpnet.training import pipelines


def _blobs_config(run_dir: Path) -> dict:
    config = pipelines.load_preset("blobs-min")
    config["train"]["run_dir"] = str(run_dir)
    config["train"]["max_epochs"] = 12
    return config


def test_run_pipeline_writes_artifacts(tmp_path, capsys):
    run_dir = tmp_path / "run"
    result = pipelines.run_pipeline(_blobs_config(run_dir))

    banner = capsys.readouterr().out
    assert "=== mlpnet run ===" in banner
    assert "Dimensions    : [2, 8, 3]" in banner

    for name in (
        "metrics_train.jsonl",
        "metrics_val.jsonl",
        "metrics_test.jsonl",
        "metrics_train.csv",
        "metrics_test.json",
        "manifest.json",
        "summary.json",
        "config.json",
        "metrics.jsonl",
    ):
        assert (run_dir / name).exists(), name

    train_records = [
        json.loads(line) for line in (run_dir / "metrics_train.jsonl").read_text().splitlines()
    ]
    assert len(train_records) == result.epochs
    assert [record["epoch"] for record in train_records] == list(range(1, result.epochs + 1))
    assert {"loss", "misclassification", "lr", "split", "seed", "sha"} <= set(train_records[0])

    with (run_dir / "metrics_val.csv").open() as handle:
        reader = csv.DictReader(handle)
        assert tuple(reader.fieldnames) == CSV_FIELDS
        assert len(list(reader)) == result.epochs

    test_lines = (run_dir / "metrics_test.jsonl").read_text().splitlines()
    assert len(test_lines) == 1
    assert json.loads(test_lines[0])["epoch"] == result.epochs

    manifest = json.loads((run_dir / "manifest.json").read_text())
    assert manifest["config"]["model"]["dims"] == [2, 8, 3]
    assert manifest["dataset"]["source"] == "synthetic"

    summary = json.loads((run_dir / "summary.json").read_text())
    assert summary["records"] == result.epochs
    assert 1 <= summary["best_epoch"] <= result.epochs

    assert result.metrics_path == str(run_dir / "metrics_train.jsonl")
    assert 0.0 <= result.test_misclassification <= 1.0
    assert not (run_dir / "loss.png").exists()


def test_enable_plots_writes_loss_curve(tmp_path):
    config = _blobs_config(tmp_path / "plots")
    config["train"]["enable_plots"] = True
    config["train"]["max_epochs"] = 3
    pipelines.run_pipeline(config)
    assert (tmp_path / "plots" / "loss.png").exists()
