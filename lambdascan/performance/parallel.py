"""
Parallel processing utilities.

Provides order preserving fan-out over independent items using a thread
pool, with per-item failure isolation.
"""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed, Future
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


class ParallelExecutor:
    """
    Thread pool executor for data-parallel passes.

    Items are independent and side-effect free; results come back in input
    order regardless of completion order. A failure in one item is logged and
    yields None for that item without affecting the others.
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        chunk_size: Optional[int] = None
    ):
        """
        Initialize parallel executor.

        Args:
            max_workers: Maximum number of worker threads (1 runs inline)
            chunk_size: Default number of items submitted per task
        """
        self.max_workers = max_workers or os.cpu_count() or 1
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        self.chunk_size = chunk_size

        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.shutdown()

    @property
    def is_sequential(self) -> bool:
        return self.max_workers == 1

    def start(self):
        """Start the executor."""
        if self._executor is None and not self.is_sequential:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="lambdascan"
            )

    def shutdown(self, wait: bool = True):
        """Shutdown the executor."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def map(
        self,
        func: Callable[[T], R],
        items: Sequence[T],
        chunk_size: Optional[int] = None
    ) -> List[Optional[R]]:
        """
        Map function over items in parallel.

        Args:
            func: Function to apply
            items: Items to process
            chunk_size: Items per submitted task

        Returns:
            List of results in original order (None where func raised)
        """
        if not items:
            return []

        if self.is_sequential:
            return [self._call(func, item) for item in items]

        self.start()
        chunk_size = chunk_size or self.chunk_size or self._default_chunk_size(len(items))

        futures: Dict[Future, int] = {}
        for i in range(0, len(items), chunk_size):
            chunk = items[i:i + chunk_size]
            future = self._executor.submit(self._process_chunk, func, chunk)
            futures[future] = i

        results: List[Optional[R]] = [None] * len(items)
        for future in as_completed(futures):
            idx = futures[future]
            for j, result in enumerate(future.result()):
                results[idx + j] = result

        return results

    def filter(self, predicate: Callable[[T], bool], items: Sequence[T]) -> List[T]:
        """Keep the items for which predicate holds, preserving order."""
        flags = self.map(predicate, items)
        return [item for item, keep in zip(items, flags) if keep]

    def _default_chunk_size(self, total: int) -> int:
        # A few chunks per worker keeps the pool busy without per-item overhead
        return max(1, total // (self.max_workers * 4))

    @classmethod
    def _process_chunk(cls, func: Callable, chunk: Sequence) -> List[Any]:
        """Process a chunk of items."""
        return [cls._call(func, item) for item in chunk]

    @staticmethod
    def _call(func: Callable, item: Any) -> Any:
        try:
            return func(item)
        except Exception as e:
            logger.error(f"Task failed for {item!r}: {e}")
            return None
