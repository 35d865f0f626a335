import numpy as np
import pandas as pd
import pytest

from mlpnet.core.types import Batch
from mlpnet.data import available_datasets, get_dataset, register_dataset
from mlpnet.data.iris import split_features_labels
from mlpnet.data.registry import DatasetSpec, DataSpec
from mlpnet.data.utils import deterministic_split


def _write_iris_split(path, rows):
    lines = [" ".join(str(v) for v in row) for row in rows]
    path.write_text("\n".join(lines) + "\n")


def test_builtin_datasets_are_registered():
    assert {"blobs", "csv_classification", "iris"} <= set(available_datasets())


def test_iris_from_sklearn_is_split_deterministically():
    first = get_dataset("iris", seed=3)
    second = get_dataset("iris", seed=3)
    assert first.sizes == {"train": 90, "val": 30, "test": 30}
    assert first.data_spec.d_in == 4
    assert first.data_spec.num_classes == 3
    assert first.split("train").targets.dtype == bool
    assert np.array_equal(first.split("val").inputs, second.split("val").inputs)


def test_iris_from_split_files(tmp_path):
    _write_iris_split(
        tmp_path / "iris_training.dat",
        [[5.1, 3.5, 1.4, 0.2, 1, 0, 0], [6.4, 3.2, 4.5, 1.5, 0, 1, 0]],
    )
    _write_iris_split(tmp_path / "iris_validation.dat", [[6.3, 3.3, 6.0, 2.5, 0, 0, 1]])
    _write_iris_split(tmp_path / "iris_test.dat", [[4.9, 3.0, 1.4, 0.2, 1, 0, 0]])

    spec = get_dataset("iris", data_dir=str(tmp_path))
    assert spec.sizes == {"train": 2, "val": 1, "test": 1}
    train = spec.split("train")
    assert np.allclose(train.inputs[1], [6.4, 3.2, 4.5, 1.5])
    assert train.targets.tolist() == [[True, False, False], [False, True, False]]
    assert spec.provenance["source"] == "files"


def test_iris_missing_split_file(tmp_path):
    _write_iris_split(tmp_path / "iris_training.dat", [[5.1, 3.5, 1.4, 0.2, 1, 0, 0]])
    with pytest.raises(FileNotFoundError):
        get_dataset("iris", data_dir=str(tmp_path))


def test_split_features_labels_validates_columns():
    with pytest.raises(ValueError):
        split_features_labels(np.ones((2, 6)))
    with pytest.raises(ValueError):
        split_features_labels(np.array([[1.0, 2.0, 3.0, 4.0, 1.0, 1.0, 0.0]]))


def test_csv_classification(tmp_path):
    rng = np.random.default_rng(0)
    frame = pd.DataFrame(rng.standard_normal((40, 3)), columns=["a", "b", "c"])
    frame["label"] = ["cat", "dog"] * 20
    path = tmp_path / "data.csv"
    frame.to_csv(path, index=False)

    spec = get_dataset("csv_classification", csv_path=str(path), target_col="label")
    assert spec.data_spec.d_in == 3
    assert spec.data_spec.num_classes == 2
    assert spec.data_spec.extra["classes"] == ["cat", "dog"]
    assert sum(spec.sizes.values()) == 40
    assert "inputs" in spec.data_spec.normalization


def test_csv_missing_target_column(tmp_path):
    path = tmp_path / "data.csv"
    pd.DataFrame({"a": [1.0, 2.0]}).to_csv(path, index=False)
    with pytest.raises(KeyError):
        get_dataset("csv_classification", csv_path=str(path))


def test_unknown_dataset_raises():
    with pytest.raises(KeyError):
        get_dataset("nope")


def test_unknown_split_name_raises():
    spec = get_dataset("blobs")
    with pytest.raises(ValueError):
        spec.split("holdout")


@pytest.mark.parametrize(
    "kwargs", [{"val_split": 1.0}, {"test_split": -0.1}, {"val_split": 0.5, "test_split": 0.5}]
)
def test_bad_split_ratios_rejected(kwargs):
    with pytest.raises(ValueError):
        deterministic_split(10, **kwargs)


def test_registry_rejects_non_one_hot_targets():
    @register_dataset("test_soft_targets")
    def _soft_targets():
        batch = Batch(inputs=np.zeros((2, 2)), targets=np.array([[0.5, 0.5], [1.0, 0.0]]))
        return DatasetSpec(
            name="test_soft_targets",
            splits={"train": batch},
            data_spec=DataSpec(d_in=2, d_out=2, num_classes=2),
            provenance={},
        )

    with pytest.raises(ValueError):
        get_dataset("test_soft_targets")
