import json

import numpy as np
import pytest

from mlpnet.core.types import Batch
from mlpnet.training import pipelines


def _run(tmp_path, name):
    config = pipelines.load_preset("blobs-min")
    config["train"]["run_dir"] = str(tmp_path / name)
    config["train"]["max_epochs"] = 20
    return pipelines.run_pipeline(config)


def test_identical_configs_give_identical_metrics(tmp_path):
    first = _run(tmp_path, "a")
    second = _run(tmp_path, "b")
    assert first.epochs == second.epochs
    assert first.test_loss == second.test_loss

    def _losses(result):
        with open(result.metrics_path) as handle:
            return [json.loads(line)["loss"] for line in handle]

    assert _losses(first) == _losses(second)


def test_iris_plain_preset_runs(tmp_path):
    config = pipelines.load_preset("iris-plain")
    config["train"]["run_dir"] = str(tmp_path / "iris")
    result = pipelines.run_pipeline(config)
    assert 1 <= result.epochs <= 1000


def test_presets_and_merge():
    assert {"blobs-min", "iris-plain", "iris-tanh"} <= set(pipelines.presets())
    with pytest.raises(KeyError):
        pipelines.load_preset("missing")

    merged = pipelines.merge_config(
        {"train": {"lr": 0.1, "max_epochs": 10}}, {"train": {"lr": 0.5}}
    )
    assert merged == {"train": {"lr": 0.5, "max_epochs": 10}}


def test_build_network_seeds_layers_by_position():
    batch = Batch(inputs=np.array([[0.0, 1.0, 2.0]]), targets=np.array([[True, False]]))
    cfg = {"hidden": [4, 5], "activation": "tanh", "seed": 10}
    network = pipelines.build_network(cfg, batch)
    again = pipelines.build_network(cfg, batch)

    assert [layer.weights.shape for layer in network.layers] == [(4, 4), (5, 5), (6, 2)]
    for a, b in zip(network.layers, again.layers):
        assert np.array_equal(a.weights, b.weights)

    with pytest.raises(ValueError):
        pipelines.build_network({"d_in": 2}, batch)
