"""Iris flower classification data.

Two sources are supported. With ``data_dir`` the three split files
``iris_training.dat``, ``iris_validation.dat`` and ``iris_test.dat`` are read;
every line holds four whitespace-separated features followed by three one-hot
label columns. Without it the copy bundled with scikit-learn is split
deterministically.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.datasets import load_iris

from ..core.labels import is_one_hot
from ..core.types import Batch
from .registry import DatasetSpec, DataSpec, register_dataset
from .utils import deterministic_split, encode_targets, split_batches, standardize

NUM_FEATURES = 4
NUM_CLASSES = 3
SPLIT_FILES = {
    "train": "iris_training.dat",
    "val": "iris_validation.dat",
    "test": "iris_test.dat",
}


def read_data(path: str | Path) -> np.ndarray:
    """Read a whitespace-delimited numeric table into a float array."""

    frame = pd.read_csv(Path(path), sep=r"\s+", header=None, dtype=np.float64)
    return frame.to_numpy(dtype=np.float64)


def split_features_labels(
    table: np.ndarray, num_features: int = NUM_FEATURES, num_classes: int = NUM_CLASSES
) -> Batch:
    """Split a loaded table into leading features and trailing one-hot labels."""

    if table.shape[1] != num_features + num_classes:
        raise ValueError(
            f"expected {num_features + num_classes} columns, found {table.shape[1]}"
        )
    inputs = table[:, :num_features]
    labels = table[:, -num_classes:]
    if not is_one_hot(labels):
        raise ValueError("label columns are not strictly one-hot")
    return Batch(inputs=inputs, targets=labels.astype(bool))


def _from_files(data_dir: Path) -> dict[str, Batch]:
    splits: dict[str, Batch] = {}
    for split, filename in SPLIT_FILES.items():
        path = data_dir / filename
        if not path.exists():
            raise FileNotFoundError(f"missing iris split file: {path}")
        splits[split] = split_features_labels(read_data(path))
    return splits


@register_dataset("iris")
def build_iris_dataset(
    *,
    data_dir: str | Path | None = None,
    val_split: float = 0.2,
    test_split: float = 0.2,
    seed: int = 0,
    standardize_inputs: bool = False,
) -> DatasetSpec:
    """Return the iris dataset specification."""

    normalization: dict[str, dict[str, list[float]]] = {}
    if data_dir is not None:
        root = Path(data_dir)
        splits = _from_files(root)
        provenance: dict[str, object] = {"source": "files", "data_dir": str(root)}
        class_names = [f"class_{idx}" for idx in range(NUM_CLASSES)]
    else:
        bunch = load_iris()
        features = bunch.data.astype(np.float64)
        if standardize_inputs:
            features, mean, std = standardize(features)
            normalization["inputs"] = {
                "mean": mean.flatten().tolist(),
                "std": std.flatten().tolist(),
            }
        one_hot = encode_targets(bunch.target, NUM_CLASSES)
        indices = deterministic_split(
            features.shape[0], val_split=val_split, test_split=test_split, seed=seed
        )
        splits = split_batches(features, one_hot, indices)
        provenance = {
            "source": "sklearn",
            "val_split": val_split,
            "test_split": test_split,
            "seed": seed,
            "standardize_inputs": standardize_inputs,
        }
        class_names = [str(name) for name in bunch.target_names]

    data_spec = DataSpec(
        d_in=NUM_FEATURES,
        d_out=NUM_CLASSES,
        num_classes=NUM_CLASSES,
        normalization=normalization,
        extra={"classes": class_names},
    )
    return DatasetSpec(name="iris", splits=splits, data_spec=data_spec, provenance=provenance)


__all__ = ["build_iris_dataset", "read_data", "split_features_labels"]
