"""Generic CSV loader for classification tasks."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder

from .registry import DatasetSpec, DataSpec, register_dataset
from .utils import deterministic_split, encode_targets, split_batches, standardize


def _load_csv(path: Path, target_col: str) -> tuple[np.ndarray, np.ndarray]:
    df = pd.read_csv(path)
    if target_col not in df.columns:
        raise KeyError(f"Target column {target_col!r} not found in CSV")
    y = df.pop(target_col).to_numpy()
    X = df.to_numpy(dtype=np.float64)
    return X, y


@register_dataset("csv_classification")
def load_csv_classification(
    *,
    csv_path: str | Path,
    target_col: str = "target",
    val_split: float = 0.2,
    test_split: float = 0.2,
    seed: int = 0,
    standardize_inputs: bool = True,
) -> DatasetSpec:
    """Load a classification dataset from a CSV file."""

    path = Path(csv_path)
    X, y_raw = _load_csv(path, target_col)
    encoder = LabelEncoder()
    y_encoded = encoder.fit_transform(y_raw)
    num_classes = len(encoder.classes_)

    normalization: dict[str, dict[str, list[float]]] = {}
    if standardize_inputs:
        X, mean, std = standardize(X)
        normalization["inputs"] = {
            "mean": mean.flatten().tolist(),
            "std": std.flatten().tolist(),
        }

    splits = deterministic_split(
        X.shape[0], val_split=val_split, test_split=test_split, seed=seed
    )

    data_spec = DataSpec(
        d_in=int(X.shape[1]),
        d_out=num_classes,
        num_classes=num_classes,
        normalization=normalization,
        extra={"classes": [str(c) for c in encoder.classes_]},
    )

    provenance = {
        "path": str(path),
        "val_split": val_split,
        "test_split": test_split,
        "seed": seed,
        "target_col": target_col,
        "standardize_inputs": standardize_inputs,
    }

    return DatasetSpec(
        name="csv_classification",
        splits=split_batches(X, encode_targets(y_encoded, num_classes), splits),
        data_spec=data_spec,
        provenance=provenance,
    )


__all__ = ["load_csv_classification"]
