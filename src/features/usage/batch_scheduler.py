import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from util import log

T = TypeVar("T")
R = TypeVar("R")


async def run_batches(
    items: Sequence[T],
    fn: Callable[[T], Awaitable[R]],
    concurrency: int = 10,
    delay_s: float = 0.1,
) -> list[R]:
    """
    Runs `fn` over all items in consecutive chunks of `concurrency` items.

    Each chunk runs concurrently and must fully settle before the next one starts, with a
    pause of `delay_s` between chunks (never after the last one). Results keep the input order.
    Failures are expected to be folded into the result values by `fn` itself.
    """
    if concurrency < 1:
        raise ValueError(f"Concurrency must be positive, got {concurrency}")
    results: list[R] = []
    for start in range(0, len(items), concurrency):
        chunk = items[start:start + concurrency]
        log.t(f"Running chunk {start // concurrency + 1} with {len(chunk)} items")
        results.extend(await asyncio.gather(*(fn(item) for item in chunk)))
        if start + concurrency < len(items):
            await asyncio.sleep(delay_s)
    return results
