"""Read-only query cache with staleness and a polling refresher."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import requests
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .adapters.rest_api import ApiError

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Cached data for one query plus its fetch status."""

    data: list = field(default_factory=list)
    error: str | None = None
    fetched_at: float | None = None

    @property
    def is_loading(self) -> bool:
        """True until the first successful fetch."""
        return self.fetched_at is None


class QueryCache:
    """
    Caches list queries by key.

    Fetch failures never propagate: the error is recorded and the last good
    data (or an empty list) is served.
    """

    def __init__(self, stale_time: float = 300, clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self._clock = clock
        self._entries: dict[str, QueryResult] = {}

    def peek(self, key: str) -> QueryResult:
        return self._entries.get(key) or QueryResult()

    def is_stale(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.fetched_at is None:
            return True
        return self._clock() - entry.fetched_at >= self.stale_time

    def get(self, key: str, fetcher: Callable[[], list]) -> QueryResult:
        """Serve fresh data from cache, fetching when stale."""
        if not self.is_stale(key):
            return self._entries[key]
        return self.refetch(key, fetcher)

    def refetch(self, key: str, fetcher: Callable[[], list]) -> QueryResult:
        """Fetch regardless of staleness."""
        entry = self.peek(key)
        try:
            data = fetcher()
        except (ApiError, requests.RequestException) as e:
            logger.warning(f"Failed to fetch {key}: {e}")
            result = QueryResult(data=entry.data, error=str(e), fetched_at=entry.fetched_at)
        else:
            result = QueryResult(data=list(data), fetched_at=self._clock())
        self._entries[key] = result
        return result

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)


@dataclass
class _PolledQuery:
    fetcher: Callable[[], list]
    on_result: Callable[[QueryResult], Any]


class Poller:
    """
    Refetches registered queries on a fixed interval.

    Each result goes to its callback as soon as it lands, so whichever fetch
    completes last wins.
    """

    def __init__(self, cache: QueryCache, interval: int = 5, scheduler: BlockingScheduler | None = None):
        self.cache = cache
        self.interval = interval
        self.scheduler = scheduler or BlockingScheduler()
        self._queries: dict[str, _PolledQuery] = {}

    def register(self, key: str, fetcher: Callable[[], list], on_result: Callable[[QueryResult], Any]) -> None:
        self._queries[key] = _PolledQuery(fetcher, on_result)

    def poll_once(self) -> None:
        """Refetch every registered query and hand each result to its callback."""
        for key, query in self._queries.items():
            query.on_result(self.cache.refetch(key, query.fetcher))

    def start(self) -> None:
        """Poll immediately, then every interval until interrupted. Blocks."""
        self.poll_once()
        self.scheduler.add_job(
            self.poll_once,
            IntervalTrigger(seconds=self.interval),
            id="faithlife-poll",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info(f"Polling {', '.join(self._queries)} every {self.interval}s")
        self.scheduler.start()

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
