from datetime import datetime

from pydantic import BaseModel, ConfigDict

from features.usage.fetch_result import FetchResult


class UsageTotals(BaseModel):
    model_config = ConfigDict(frozen = True)

    total_used: float = 0
    total_allowance: float = 0
    total_remaining: float = 0


class AggregateSnapshot(BaseModel):
    """
    One immutable aggregation pass over the whole key set.

    Records hold every usage record ordered by remaining allowance (highest first),
    followed by the error records in the order their fetches completed.
    """
    model_config = ConfigDict(frozen = True)

    generated_at: datetime
    update_time: str
    total_credentials: int
    totals: UsageTotals
    records: tuple[FetchResult, ...]
