from dataclasses import dataclass

from features.usage.aggregate_snapshot import AggregateSnapshot


@dataclass(frozen = True)
class CacheEmpty:
    pass


@dataclass(frozen = True)
class CacheUpdating:
    # what readers keep seeing until the refresh lands
    previous: AggregateSnapshot | None = None


@dataclass(frozen = True)
class CacheReady:
    snapshot: AggregateSnapshot


@dataclass(frozen = True)
class CacheFailed:
    message: str


CacheState = CacheEmpty | CacheUpdating | CacheReady | CacheFailed
