# Taptik Batch Runner
# Runs per-item pipeline work concurrently with per-item failure isolation

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchItem(Generic[R]):
    """Outcome of one item in a batch run."""

    index: int
    result: R | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the item completed without raising."""
        return self.error is None


def run_batch(func: Callable[[T], R], items: Sequence[T], *, max_workers: int = 4) -> list[BatchItem[R]]:
    """
    Apply a function to every item on a thread pool.

    An exception raised for one item is recorded against that item only;
    the remaining items always run to completion.

    Args:
        func: Work to perform for each item.
        items: Input items.
        max_workers: Thread pool size.

    Returns:
        One BatchItem per input, in input order.
    """
    outcomes: list[BatchItem[R]] = [BatchItem(index=i) for i in range(len(items))]
    if not items:
        return outcomes

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = {pool.submit(func, item): index for index, item in enumerate(items)}
        for future in as_completed(futures):
            index = futures[future]
            try:
                outcomes[index].result = future.result()
            except Exception as e:
                logger.warning("Batch item %d failed: %s", index, e)
                outcomes[index].error = str(e) or e.__class__.__name__

    return outcomes
