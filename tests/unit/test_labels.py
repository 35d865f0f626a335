import threading

import numpy as np
import pytest

from mlpnet.core.labels import is_one_hot, to_index_labels, to_one_hot_labels
from mlpnet.core.parallel import range_parallel, row_argmax


def test_index_labels_from_one_hot():
    one_hot = np.array([[False, True, False], [True, False, False], [False, False, True]])
    indices = to_index_labels(one_hot)
    assert indices.shape == (3, 1)
    assert indices.ravel().tolist() == [1, 0, 2]


@pytest.mark.parametrize("max_workers", [1, 4])
def test_one_hot_round_trip(max_workers):
    rng = np.random.default_rng(3)
    indices = rng.integers(0, 5, size=(1000, 1))
    one_hot = to_one_hot_labels(indices, 5, max_workers=max_workers)
    assert one_hot.dtype == bool
    assert one_hot.shape == (1000, 5)
    assert is_one_hot(one_hot)
    assert np.array_equal(to_index_labels(one_hot), indices)
    assert np.array_equal(to_one_hot_labels(to_index_labels(one_hot), 5), one_hot)


def test_one_hot_rejects_out_of_range_indices():
    with pytest.raises(ValueError):
        to_one_hot_labels(np.array([[0], [-1]]), 3)
    with pytest.raises(ValueError):
        to_one_hot_labels(np.array([[0], [3]]), 3)
    with pytest.raises(ValueError):
        to_one_hot_labels(np.array([[0.0], [1.9]]), 3)


def test_one_hot_to_indices_and_back():
    one_hot = np.eye(4, dtype=bool)[[3, 0, 2, 2, 1]]
    assert np.array_equal(to_one_hot_labels(to_index_labels(one_hot), 4), one_hot)
    assert to_one_hot_labels(np.array([[0.0], [2.0]]), 3).tolist() == [
        [True, False, False],
        [False, False, True],
    ]


def test_one_hot_of_empty_indices():
    assert to_one_hot_labels(np.zeros((0, 1), dtype=int), 4).shape == (0, 4)


@pytest.mark.parametrize(
    "labels, expected",
    [
        ([[1, 0], [0, 1]], True),
        ([[1, 1], [0, 1]], False),
        ([[0, 0], [0, 1]], False),
        ([[0.5, 0.5]], False),
        ([1, 0, 0], False),
    ],
)
def test_is_one_hot(labels, expected):
    assert is_one_hot(np.array(labels)) is expected


def test_range_parallel_covers_each_row_once():
    n = 5000
    hits = np.zeros(n, dtype=np.int64)
    chunks = []
    lock = threading.Lock()

    def _mark(start, stop):
        hits[start:stop] += 1
        with lock:
            chunks.append((start, stop))

    range_parallel(n, _mark, max_workers=4)
    assert np.all(hits == 1)
    assert len(chunks) == 4


def test_range_parallel_runs_small_inputs_inline():
    calls = []
    range_parallel(10, lambda lo, hi: calls.append((lo, hi)), max_workers=8)
    assert calls == [(0, 10)]


def test_range_parallel_skips_empty_ranges():
    calls = []
    range_parallel(0, lambda lo, hi: calls.append((lo, hi)))
    assert calls == []


def test_range_parallel_propagates_errors():
    def _fail(start, stop):
        if start > 0:
            raise RuntimeError("chunk failed")

    with pytest.raises(RuntimeError, match="chunk failed"):
        range_parallel(2048, _fail, max_workers=4)


def test_row_argmax_prefers_first_maximum():
    values = np.array([[1.0, 3.0, 3.0], [2.0, 2.0, 2.0], [0.0, -1.0, 5.0]])
    assert row_argmax(values).ravel().tolist() == [1, 0, 2]
