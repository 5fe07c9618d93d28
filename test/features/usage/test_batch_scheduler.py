import asyncio
import unittest
from unittest.mock import AsyncMock, patch

from features.usage.batch_scheduler import run_batches


class BatchSchedulerTest(unittest.IsolatedAsyncioTestCase):

    @patch("features.usage.batch_scheduler.asyncio.sleep", new_callable = AsyncMock)
    async def test_runs_in_chunks_with_delays_between(self, mock_sleep: AsyncMock):
        events: list[str] = []

        async def work(item: int) -> int:
            events.append(f"start {item}")
            events.append(f"end {item}")
            return item * 10

        results = await run_batches([1, 2, 3, 4, 5], work, concurrency = 2, delay_s = 0.5)

        self.assertEqual(results, [10, 20, 30, 40, 50])
        self.assertEqual([call.args[0] for call in mock_sleep.await_args_list], [0.5, 0.5])
        self.assertLess(events.index("end 2"), events.index("start 3"))
        self.assertLess(events.index("end 4"), events.index("start 5"))

    async def test_chunk_items_run_concurrently(self):
        running = 0
        peak = 0

        async def work(item: int) -> int:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return item

        await run_batches(list(range(6)), work, concurrency = 3, delay_s = 0)

        self.assertEqual(peak, 3)

    async def test_preserves_input_order(self):
        async def work(item: float) -> float:
            await asyncio.sleep(item)
            return item

        results = await run_batches([0.03, 0.01, 0.02], work, concurrency = 3, delay_s = 0)

        self.assertEqual(results, [0.03, 0.01, 0.02])

    @patch("features.usage.batch_scheduler.asyncio.sleep", new_callable = AsyncMock)
    async def test_single_chunk_has_no_delay(self, mock_sleep: AsyncMock):
        results = await run_batches([1, 2], AsyncMock(side_effect = lambda item: item), concurrency = 10)

        self.assertEqual(results, [1, 2])
        mock_sleep.assert_not_awaited()

    async def test_empty_input(self):
        work = AsyncMock()

        results = await run_batches([], work)

        self.assertEqual(results, [])
        work.assert_not_awaited()

    async def test_rejects_non_positive_concurrency(self):
        with self.assertRaises(ValueError):
            await run_batches([1], AsyncMock(), concurrency = 0)
