import asyncio

from db.schema.api_key import ApiKey
from di.di import DI
from features.usage.aggregate_snapshot import AggregateSnapshot
from features.usage.cache_state import CacheEmpty, CacheFailed, CacheReady, CacheUpdating
from features.usage.fetch_result import ErrorRecord, UsageRecord
from util import log
from util.error_codes import KEY_NOT_FOUND, USAGE_DATA_MISSING, USAGE_DATA_UPDATING, USAGE_REFRESH_FAILED
from util.errors import DataUnavailableError, InternalError, NotFoundError


class UsageController:

    __di: DI

    def __init__(self, di: DI):
        self.__di = di

    def fetch_usage_snapshot(self) -> AggregateSnapshot:
        match self.__di.refresh_controller.read():
            case CacheReady(snapshot = snapshot):
                return snapshot
            case CacheUpdating(previous = previous) if previous is not None:
                return previous
            case CacheUpdating():
                raise DataUnavailableError("Usage data is being updated, please wait...", USAGE_DATA_UPDATING)
            case CacheFailed(message = message):
                raise InternalError(message, USAGE_REFRESH_FAILED)
            case CacheEmpty():
                raise DataUnavailableError("No usage data yet, please refresh later", USAGE_DATA_MISSING)

    async def refresh_key(self, key_id: str) -> UsageRecord | ErrorRecord:
        log.d(f"Refreshing usage for API key '{key_id}'")
        # store access stays off the event loop
        api_key = await asyncio.to_thread(self.__find_key, key_id)
        if not api_key:
            raise NotFoundError(f"Key '{key_id}' not found", KEY_NOT_FOUND)
        return await self.__di.usage_fetcher.fetch(api_key.id, api_key.key)

    def __find_key(self, key_id: str) -> ApiKey | None:
        api_key_db = self.__di.api_key_crud.get(key_id)
        return ApiKey.model_validate(api_key_db) if api_key_db else None
