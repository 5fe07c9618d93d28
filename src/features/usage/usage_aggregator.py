from datetime import datetime, timezone
from typing import Callable, Sequence

from db.schema.api_key import ApiKey
from features.usage.aggregate_snapshot import AggregateSnapshot, UsageTotals
from features.usage.fetch_result import ErrorRecord, UsageRecord
from util import log
from util.config import config
from util.functions import display_time

BalanceAudit = Callable[[list[str]], None]


def aggregate(
    results: Sequence[UsageRecord | ErrorRecord],
    credentials: Sequence[ApiKey] | None = None,
    audit: BalanceAudit | None = None,
    now: datetime | None = None,
) -> AggregateSnapshot:
    now = now or datetime.now(timezone.utc)
    usage_records: list[UsageRecord] = []
    error_records: list[ErrorRecord] = []
    for result in results:
        match result:
            case UsageRecord():
                usage_records.append(result)
            case ErrorRecord():
                error_records.append(result)
            case _:
                raise TypeError(f"Unknown fetch result type: {type(result).__name__}")

    # sorted() is stable, ties keep the fetch order
    sorted_usage = sorted(usage_records, key = lambda record: record.remaining, reverse = True)
    totals = UsageTotals(
        total_used = sum(record.used for record in usage_records),
        total_allowance = sum(record.allowance for record in usage_records),
        total_remaining = sum(record.remaining for record in usage_records),
    )

    if audit:
        audit(__keys_with_balance(usage_records, credentials or []))

    return AggregateSnapshot(
        generated_at = now,
        update_time = display_time(now, config.display_tz_offset_hours),
        total_credentials = len(results),
        totals = totals,
        records = (*sorted_usage, *error_records),
    )


def log_keys_with_balance(keys: list[str]):
    if not keys:
        log.i("No API keys with remaining balance")
        return
    log.i(f"API keys with remaining balance ({len(keys)}):\n" + "\n".join(keys))


def __keys_with_balance(usage_records: list[UsageRecord], credentials: Sequence[ApiKey]) -> list[str]:
    keys_by_id = {credential.id: credential.key for credential in credentials}
    return [
        keys_by_id[record.id]
        for record in usage_records
        if record.allowance - record.used > 0 and record.id in keys_by_id
    ]
