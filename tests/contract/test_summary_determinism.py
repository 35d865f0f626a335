import json

import pytest

from mlpnet.reporting.metrics import JsonlSink
from mlpnet.reporting.summary import build_summary, compute_auc, write_summary


def test_compute_auc_trapezoid():
    assert compute_auc([1.0]) == 0.0
    assert compute_auc([1.0, 3.0, 1.0]) == pytest.approx(4.0)


def test_summary_is_deterministic(tmp_path):
    sink = JsonlSink(tmp_path / "metrics_val.jsonl", split="val", seed=1, sha="abc")
    for epoch, loss in enumerate([0.9, 0.5, 0.7], start=1):
        sink.on_epoch(epoch, {"loss": loss, "misclassification": 0.1, "lr": 0.1})

    first = write_summary(sink.path, tmp_path / "a.json", tail=2)
    second = write_summary(sink.path, tmp_path / "b.json", tail=2)
    text = (tmp_path / "a.json").read_text()
    assert text == (tmp_path / "b.json").read_text()
    assert first.endswith("a.json") and second.endswith("b.json")

    summary = json.loads(text)
    assert summary["records"] == 3
    assert summary["best_epoch"] == 2
    assert summary["metrics"]["loss"]["last"] == pytest.approx(0.7)
    assert summary["metrics"]["loss"]["tail_auc"] == pytest.approx(0.6)
    assert "seed" not in summary["metrics"]


def test_empty_summary():
    summary = build_summary([], tail=5)
    assert summary["records"] == 0
    assert summary["best_epoch"] is None
