"""Conversions between one-hot and class-index labels."""

from __future__ import annotations

import numpy as np

from .parallel import range_parallel
from .types import Array


def to_index_labels(one_hot: Array) -> Array:
    """Map each one-hot row to the position of its ``True`` column.

    Computed as a product against ``[0, ..., C-1]``, so the result is only
    meaningful when every row holds exactly one ``True``.
    """

    one_hot = np.asarray(one_hot)
    num_classes = one_hot.shape[1]
    positions = np.arange(num_classes, dtype=np.int64).reshape(-1, 1)
    return one_hot.astype(np.int64) @ positions


def to_one_hot_labels(
    indices: Array, num_classes: int, *, max_workers: int | None = None
) -> Array:
    """Return an ``N x num_classes`` boolean matrix for ``N x 1`` ``indices``."""

    raw = np.asarray(indices).reshape(-1)
    if raw.size and not np.all(np.mod(raw, 1) == 0):
        raise ValueError("label indices must be whole numbers")
    flat = raw.astype(np.int64)
    if flat.size and flat.min() < 0:
        raise ValueError("received negative label indices")
    if flat.size and flat.max() >= num_classes:
        raise ValueError(
            f"label index {int(flat.max())} out of range for num_classes={num_classes}"
        )

    one_hot = np.zeros((flat.size, int(num_classes)), dtype=bool)

    def _fill(start: int, stop: int) -> None:
        rows = np.arange(start, stop)
        one_hot[rows, flat[start:stop]] = True

    range_parallel(flat.size, _fill, max_workers=max_workers)
    return one_hot


def is_one_hot(labels: Array) -> bool:
    """Return ``True`` when every row of ``labels`` has exactly one truthy entry."""

    labels = np.asarray(labels)
    if labels.ndim != 2:
        return False
    if not np.all((labels == 0) | (labels == 1)):
        return False
    return bool(np.all(labels.astype(np.int64).sum(axis=1) == 1))


__all__ = ["to_index_labels", "to_one_hot_labels", "is_one_hot"]
