from __future__ import annotations

import time
from dataclasses import dataclass

import pytest

from fprsim.errors import InvalidParameter
from fprsim.parallel import parallel_map


@dataclass(frozen=True)
class _Item:
    index: int
    seed: int


def _square_slow_first(item: _Item) -> int:
    if item.index == 0:
        time.sleep(0.05)
    return item.index * item.index


def test_parallel_map_preserves_input_order_with_threads():
    items = [_Item(index=i, seed=i) for i in range(12)]
    out = parallel_map(_square_slow_first, items, n_jobs=4, backend="threading", chunk_size=1)
    assert out == [i * i for i in range(12)]


def test_parallel_map_serial_matches_threaded():
    items = [{"seed": i, "value": i} for i in range(9)]
    serial = parallel_map(lambda d: d["value"] + 1, items, n_jobs=1)
    threaded = parallel_map(lambda d: d["value"] + 1, items, n_jobs=3, backend="threading")
    assert serial == threaded == list(range(1, 10))


def test_parallel_map_requires_seed_on_every_item():
    with pytest.raises(InvalidParameter, match="missing at indices: 1"):
        parallel_map(lambda d: d, [{"seed": 0}, {"value": 1}])


def test_parallel_map_rejects_unknown_backend():
    with pytest.raises(InvalidParameter, match="Unknown backend"):
        parallel_map(lambda d: d, [{"seed": 0}, {"seed": 1}], n_jobs=2, backend="dask")


def test_parallel_map_propagates_worker_errors():
    def _boom(item: _Item) -> int:
        if item.index == 2:
            raise ValueError("trial failed")
        return item.index

    items = [_Item(index=i, seed=i) for i in range(5)]
    with pytest.raises(ValueError, match="trial failed"):
        parallel_map(_boom, items, n_jobs=2, backend="threading")


def test_parallel_map_empty_input():
    assert parallel_map(lambda d: d, []) == []
