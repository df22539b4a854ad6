import logging
import operator
import os
from concurrent.futures import ThreadPoolExecutor
from functools import reduce as _fold
from typing import Callable, List, Optional, Tuple

from ..._errors import InvalidConfigurationError
from ...geom.commons._enums import ParallelizationMethod

logger = logging.getLogger(__name__)


def partition(size: int, max_workers: int, cache_line_size: int = 64, itemsize: int = 8) -> List[Tuple[int, int]]:
    """
    Split ``[0, size)`` into contiguous blocks, one per worker.

    The block length is ``ceil(size / workers)`` rounded up to a whole number
    of cache lines (``cache_line_size // itemsize`` elements). The worker
    count is bounded by ``max_workers`` and by ``size``; rounding can leave
    trailing workers without a block, those are not launched.

    Parameters
    ----------
    size : int
        Number of elements to process
    max_workers : int
        Upper bound on the number of blocks
    cache_line_size : int, optional
        Cache line size in bytes (default: 64)
    itemsize : int, optional
        Size of one element in bytes (default: 8, a double)

    Returns
    -------
    list of tuple
        ``(start, end)`` pairs, ordered, disjoint and covering ``[0, size)``

    Examples
    --------
    >>> partition(100, 4)
    [(0, 32), (32, 64), (64, 96), (96, 100)]
    >>> partition(0, 4)
    []
    """
    if size < 0:
        raise InvalidConfigurationError(f"size must be non-negative, got {size}.")
    if max_workers < 1:
        raise InvalidConfigurationError(f"max_workers must be at least 1, got {max_workers}.")
    n_workers = min(max_workers, size)
    if n_workers == 0:
        return []

    per_line = max(cache_line_size // itemsize, 1)
    block = -(-size // n_workers)
    block = -(-block // per_line) * per_line

    blocks = []
    for worker in range(n_workers):
        start = worker * block
        if start >= size:
            break
        blocks.append((start, min(start + block, size)))
    return blocks


class ParallelExecutor:
    """
    Bounded parallel-for / parallel-reduce over an index range.

    Each worker thread owns one contiguous block of ``[0, size)`` and the
    caller blocks until every worker has joined. There is no locking besides
    the final join: tasks may only write to caller-owned storage at positions
    inside their own block.

    Parameters
    ----------
    max_workers : int, optional
        Upper bound on concurrent workers. Defaults to ``os.cpu_count()`` for
        MULTI_THREAD and is forced to 1 for SINGLE_THREAD.
    method : ParallelizationMethod, optional
        SINGLE_THREAD or MULTI_THREAD (default: MULTI_THREAD)
    cache_line_size : int, optional
        Cache line size in bytes used to align block lengths (default: 64)
    itemsize : int, optional
        Bytes per element used to align block lengths (default: 8)

    Attributes
    ----------
    last_worker_count : int
        Number of workers launched by the most recent call

    Methods
    -------
    run(size, task)
        Call ``task(start, end)`` for every block, discard the results
    reduce(size, task, combine=operator.add, identity=0)
        Fold the per-block results of ``task(start, end)`` with ``combine``
    partial_reduce(size, task)
        Return the per-block results in block order

    Notes
    -----
    - ``size=0`` launches no worker; ``reduce`` then returns ``identity``
    - Blocks finish in no particular order. ``combine`` must be associative
      and commutative for the values it folds
    - An exception raised by a task propagates to the caller after the join

    Examples
    --------
    >>> executor = ParallelExecutor(max_workers=4)
    >>> executor.reduce(1000, lambda start, end: sum(range(start, end)))
    499500
    """
    def __init__(self, max_workers: Optional[int] = None,
                 method: ParallelizationMethod = ParallelizationMethod.MULTI_THREAD,
                 cache_line_size: int = 64, itemsize: int = 8):
        if method == ParallelizationMethod.SINGLE_THREAD:
            max_workers = 1
        elif max_workers is None:
            max_workers = os.cpu_count() or 1
        if max_workers < 1:
            raise InvalidConfigurationError(f"max_workers must be at least 1, got {max_workers}.")
        self.max_workers = max_workers
        self.method = method
        self.cache_line_size = cache_line_size
        self.itemsize = itemsize
        self.last_worker_count = 0

    def blocks(self, size: int) -> List[Tuple[int, int]]:
        return partition(size, self.max_workers, self.cache_line_size, self.itemsize)

    def _execute(self, size: int, task: Callable[[int, int], object]) -> list:
        blocks = self.blocks(size)
        self.last_worker_count = len(blocks)
        if not blocks:
            return []

        logger.debug("Launching %d worker(s) over %d elements", len(blocks), size)
        with ThreadPoolExecutor(max_workers=len(blocks)) as pool:
            futures = [pool.submit(task, start, end) for start, end in blocks]
            return [future.result() for future in futures]

    def run(self, size: int, task: Callable[[int, int], object]) -> None:
        self._execute(size, task)

    def reduce(self, size: int, task: Callable[[int, int], object],
               combine: Callable[[object, object], object] = operator.add, identity=0):
        return _fold(combine, self._execute(size, task), identity)

    def partial_reduce(self, size: int, task: Callable[[int, int], object]) -> list:
        return self._execute(size, task)
