import asyncio
import time
from typing import Callable, Sequence

from db.schema.api_key import ApiKey
from features.usage.aggregate_snapshot import AggregateSnapshot
from features.usage.batch_scheduler import run_batches
from features.usage.cache_state import CacheEmpty, CacheFailed, CacheReady, CacheState, CacheUpdating
from features.usage.usage_aggregator import BalanceAudit, aggregate
from features.usage.usage_fetcher import UsageFetcher
from util import log
from util.config import config


class RefreshController:
    """
    Owns the cached usage snapshot and the refresh cycle that replaces it.

    Refreshes are single-flight: a trigger that arrives while one is running is dropped.
    Reads never wait for a refresh and never start one; while updating, readers keep the
    previous ready snapshot. Refresh failures are kept as state and never raised.
    """

    __state: CacheState
    __list_credentials: Callable[[], Sequence[ApiKey]]
    __fetcher: UsageFetcher
    __concurrency: int
    __delay_s: float
    __interval_s: float
    __audit: BalanceAudit | None
    __timer: asyncio.Task | None

    def __init__(
        self,
        list_credentials: Callable[[], Sequence[ApiKey]],
        fetcher: UsageFetcher,
        concurrency: int = config.fetch_concurrency,
        delay_s: float = config.batch_delay_s,
        interval_s: float = config.refresh_interval_s,
        audit: BalanceAudit | None = None,
    ):
        self.__state = CacheEmpty()
        self.__list_credentials = list_credentials
        self.__fetcher = fetcher
        self.__concurrency = concurrency
        self.__delay_s = delay_s
        self.__interval_s = interval_s
        self.__audit = audit
        self.__timer = None

    def read(self) -> CacheState:
        return self.__state

    @property
    def is_updating(self) -> bool:
        return isinstance(self.__state, CacheUpdating)

    async def refresh(self) -> bool:
        # check-and-set must happen before the first suspension point
        current_state = self.__state
        if isinstance(current_state, CacheUpdating):
            log.d("Usage refresh already in progress, skipping")
            return False
        previous = current_state.snapshot if isinstance(current_state, CacheReady) else None
        self.__state = CacheUpdating(previous)

        log.i("Starting usage refresh...")
        started_at = time.monotonic()
        try:
            snapshot = await self.__build_snapshot()
        except asyncio.CancelledError:
            self.__state = CacheFailed("Usage refresh was cancelled")
            raise
        except Exception as e:
            self.__state = CacheFailed(str(e) or type(e).__name__)
            log.e("Usage refresh failed", e)
            return True
        self.__state = CacheReady(snapshot)
        log.i(
            f"Usage refreshed in {time.monotonic() - started_at:.2f}s",
            f"Keys: {snapshot.total_credentials}",
            f"Remaining: {snapshot.totals.total_remaining:,.0f}",
        )
        return True

    async def __build_snapshot(self) -> AggregateSnapshot:
        credentials = list(await asyncio.to_thread(self.__list_credentials))
        results = await run_batches(
            credentials,
            lambda credential: self.__fetcher.fetch(credential.id, credential.key),
            concurrency = self.__concurrency,
            delay_s = self.__delay_s,
        )
        return aggregate(results, credentials, self.__audit)

    def start(self):
        if self.__timer is None:
            self.__timer = asyncio.create_task(self.__run_timer())
            log.i(f"Usage auto-refresh started, interval: {self.__interval_s}s")

    async def stop(self):
        if self.__timer is None:
            return
        self.__timer.cancel()
        try:
            await self.__timer
        except asyncio.CancelledError:
            pass
        self.__timer = None
        log.i("Usage auto-refresh stopped")

    async def __run_timer(self):
        while True:
            await asyncio.sleep(self.__interval_s)
            await self.refresh()
