"""Tests for the parallel executor."""

import logging
import threading

import pytest

from lambdascan.performance.parallel import ParallelExecutor


class TestParallelExecutor:
    """Order preservation and failure isolation."""

    def test_map_preserves_order(self):
        with ParallelExecutor(max_workers=4, chunk_size=3) as executor:
            assert executor.map(lambda x: x * x, list(range(100))) == [x * x for x in range(100)]

    def test_map_empty(self):
        with ParallelExecutor(max_workers=2) as executor:
            assert executor.map(str, []) == []

    def test_sequential_runs_inline(self):
        threads = set()

        def record(item):
            threads.add(threading.current_thread().name)
            return item

        with ParallelExecutor(max_workers=1) as executor:
            assert executor.is_sequential
            assert executor.map(record, [1, 2, 3]) == [1, 2, 3]
        assert threads == {threading.current_thread().name}

    def test_failure_isolated(self, caplog):
        def invert(x):
            return 1 / x

        with ParallelExecutor(max_workers=2, chunk_size=1) as executor:
            with caplog.at_level(logging.ERROR, logger="lambdascan"):
                results = executor.map(invert, [1, 0, 2])
        assert results == [1.0, None, 0.5]
        assert "Task failed for 0" in caplog.text

    def test_filter(self):
        with ParallelExecutor(max_workers=3) as executor:
            assert executor.filter(lambda x: x % 2 == 0, list(range(10))) == [0, 2, 4, 6, 8]

    def test_map_starts_lazily(self):
        executor = ParallelExecutor(max_workers=2)
        try:
            assert executor.map(abs, [-1, -2]) == [1, 2]
        finally:
            executor.shutdown()

    def test_default_worker_count(self):
        assert ParallelExecutor().max_workers >= 1

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            ParallelExecutor(max_workers=-1)
