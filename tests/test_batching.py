"""Tests for the fixed-size batcher."""

from __future__ import annotations

import pytest

from cc_batcher.ingest.batching import batched


def test_sizes_for_2500_items() -> None:
    items = list(range(2500))

    batches = list(batched(items, 1000))

    assert [len(batch) for batch in batches] == [1000, 1000, 500]
    assert [item for batch in batches for item in batch] == items


def test_exact_multiple_has_no_empty_tail() -> None:
    batches = list(batched(range(6), 3))

    assert batches == [[0, 1, 2], [3, 4, 5]]


@pytest.mark.parametrize("count,size", [(1, 1000), (7, 3), (10, 1), (999, 1000)])
def test_concatenation_reproduces_input(count: int, size: int) -> None:
    items = list(range(count))

    batches = list(batched(items, size))

    assert [item for batch in batches for item in batch] == items
    assert all(len(batch) == size for batch in batches[:-1])
    assert all(batches)


def test_empty_input_yields_nothing() -> None:
    assert list(batched([], 1000)) == []


def test_consumes_lazily() -> None:
    pulled: list[int] = []

    def source():
        for i in range(10):
            pulled.append(i)
            yield i

    first = next(batched(source(), 3))

    assert first == [0, 1, 2]
    assert pulled == [0, 1, 2]


@pytest.mark.parametrize("size", [0, -1])
def test_rejects_non_positive_size(size: int) -> None:
    with pytest.raises(ValueError):
        list(batched([1, 2], size))
