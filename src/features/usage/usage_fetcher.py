import asyncio
from typing import Any

import httpx

from features.usage.fetch_result import ErrorRecord, UsageRecord
from util import log
from util.config import config
from util.functions import format_epoch_ms_date, mask_secret

FETCH_FAILED = "Failed to fetch"
INVALID_RESPONSE = "Invalid API response"


class UsageFetcher:
    """
    Reads the usage window of a single API key from the remote metering endpoint.

    Every outcome is folded into a result record: transport problems, bad statuses and
    malformed bodies become error records. Only 401 responses are retried, with a
    linearly growing delay between attempts.
    """

    __client: httpx.AsyncClient
    __endpoint: str
    __user_agent: str
    __auth_retries: int
    __auth_retry_delay_s: float

    def __init__(
        self,
        endpoint: str = config.usage_api_endpoint,
        user_agent: str = config.usage_api_user_agent,
        timeout_s: float = config.fetch_timeout_s,
        auth_retries: int = config.auth_retries,
        auth_retry_delay_s: float = config.auth_retry_delay_s,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.__endpoint = endpoint
        self.__user_agent = user_agent
        self.__auth_retries = auth_retries
        self.__auth_retry_delay_s = auth_retry_delay_s
        self.__client = httpx.AsyncClient(timeout = timeout_s, follow_redirects = True, transport = transport)

    async def aclose(self):
        await self.__client.aclose()

    async def fetch(self, key_id: str, key: str, attempt: int = 0) -> UsageRecord | ErrorRecord:
        masked_key = mask_secret(key)
        headers = {
            "Authorization": f"Bearer {key}",
            "User-Agent": self.__user_agent,
        }
        try:
            response = await self.__client.get(self.__endpoint, headers = headers)
        except (httpx.HTTPError, UnicodeError) as e:
            # header encoding fails here too, for secrets httpx cannot send
            log.w(f"Usage fetch for '{key_id}' failed: {type(e).__name__} {e}")
            return ErrorRecord(id = key_id, masked_key = masked_key, error = FETCH_FAILED)

        if response.status_code == 401 and attempt < self.__auth_retries:
            delay_s = (attempt + 1) * self.__auth_retry_delay_s
            log.d(f"Key '{key_id}' was rejected, retrying in {delay_s}s (attempt {attempt + 1}/{self.__auth_retries})")
            await asyncio.sleep(delay_s)
            return await self.fetch(key_id, key, attempt + 1)
        if not response.is_success:
            log.d(f"Usage fetch for '{key_id}' returned HTTP {response.status_code}")
            return ErrorRecord(id = key_id, masked_key = masked_key, error = f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            log.w(f"Usage response for '{key_id}' is not JSON: {e}")
            return ErrorRecord(id = key_id, masked_key = masked_key, error = FETCH_FAILED)

        usage = payload.get("usage") if isinstance(payload, dict) else None
        standard = usage.get("standard") if isinstance(usage, dict) else None
        if not isinstance(usage, dict) or not isinstance(standard, dict):
            return ErrorRecord(id = key_id, masked_key = masked_key, error = INVALID_RESPONSE)

        log.t(f"Usage fetched for '{key_id}'")
        return UsageRecord(
            id = key_id,
            masked_key = masked_key,
            window_start = format_epoch_ms_date(usage.get("startDate")),
            window_end = format_epoch_ms_date(usage.get("endDate")),
            used = self.__number(standard.get("orgTotalTokensUsed")),
            allowance = self.__number(standard.get("totalAllowance")),
            used_ratio = self.__number(standard.get("usedRatio")),
        )

    @staticmethod
    def __number(value: Any) -> float:
        if value is None or isinstance(value, bool):
            return 0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0
