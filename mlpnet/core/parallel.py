"""Chunked per-row execution on a thread pool."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Tuple

import numpy as np

from .types import Array

RowRangeFn = Callable[[int, int], None]

MIN_ROWS_PER_WORKER = 256


def _chunks(n: int, workers: int) -> List[Tuple[int, int]]:
    bounds = np.linspace(0, n, workers + 1, dtype=int)
    return [(int(lo), int(hi)) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]


def range_parallel(n: int, func: RowRangeFn, *, max_workers: int | None = None) -> None:
    """Run ``func(start, stop)`` over contiguous chunks covering ``range(n)``.

    Every chunk must write only to its own rows. The call returns once all
    chunks have finished; an exception raised by any chunk is re-raised here.
    """

    if n <= 0:
        return
    workers = max_workers or os.cpu_count() or 1
    workers = max(1, min(workers, n // MIN_ROWS_PER_WORKER))
    if workers == 1:
        func(0, n)
        return
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(func, lo, hi) for lo, hi in _chunks(n, workers)]
        for future in futures:
            future.result()


def row_argmax(values: Array, *, max_workers: int | None = None) -> Array:
    """Return the per-row arg-max as an ``N x 1`` int array.

    Ties resolve to the lowest column index.
    """

    values = np.asarray(values)
    out = np.empty((values.shape[0], 1), dtype=np.int64)

    def _fill(start: int, stop: int) -> None:
        out[start:stop, 0] = np.argmax(values[start:stop], axis=1)

    range_parallel(values.shape[0], _fill, max_workers=max_workers)
    return out


__all__ = ["MIN_ROWS_PER_WORKER", "range_parallel", "row_argmax"]
