"""Pure in-memory Gaussian blob classification data."""

from __future__ import annotations

import numpy as np

from .registry import DatasetSpec, DataSpec, register_dataset
from .utils import deterministic_split, encode_targets, split_batches


def make_blobs(
    n_classes: int, n_features: int, samples_per_class: int, spread: float, seed: int
) -> tuple[np.ndarray, np.ndarray]:
    """Return features and class indices for ``n_classes`` Gaussian clusters."""

    rng = np.random.default_rng(seed)
    centers = rng.uniform(-3.0, 3.0, size=(n_classes, n_features))
    features = []
    labels = []
    for idx, center in enumerate(centers):
        features.append(center + spread * rng.standard_normal((samples_per_class, n_features)))
        labels.append(np.full(samples_per_class, idx, dtype=np.int64))
    return np.vstack(features), np.concatenate(labels)


@register_dataset("blobs")
def build_blobs_dataset(
    *,
    n_classes: int = 3,
    n_features: int = 2,
    samples_per_class: int = 40,
    spread: float = 0.4,
    seed: int = 0,
    val_split: float = 0.2,
    test_split: float = 0.2,
) -> DatasetSpec:
    X, y = make_blobs(n_classes, n_features, samples_per_class, spread, seed)
    splits = deterministic_split(
        X.shape[0], val_split=val_split, test_split=test_split, seed=seed
    )

    provenance = {
        "source": "synthetic",
        "n_classes": n_classes,
        "n_features": n_features,
        "samples_per_class": samples_per_class,
        "spread": spread,
        "seed": seed,
        "val_split": val_split,
        "test_split": test_split,
    }

    data_spec = DataSpec(d_in=n_features, d_out=n_classes, num_classes=n_classes)

    return DatasetSpec(
        name="blobs",
        splits=split_batches(X, encode_targets(y, n_classes), splits),
        data_spec=data_spec,
        provenance=provenance,
    )


__all__ = ["build_blobs_dataset", "make_blobs"]
