"""In-process ranking caches. No Redis needed for this scale.

Each slot owns one RankedSet and its snapshot file. A refresh builds into a
fresh RankedSet and swaps it in only once the build succeeds, so a failed
upstream call never leaves the slot emptied. Refreshes are single-flight per
slot: a second caller while one is running awaits the same result.

Note: Each uvicorn worker has its own slots. With --workers 2, upstream data
is fetched once per worker and both write the same snapshot files.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from config import Settings
from services.ranked_set import RankedSet
from services.refresh import RankingBuilder, RefreshResult, build_post_ranking, build_user_ranking
from services.snapshot import SnapshotStore
from services.upstream import UpstreamSource

logger = logging.getLogger(__name__)


class CacheSlot:
    def __init__(
        self,
        name: str,
        builder: RankingBuilder,
        source: UpstreamSource | None,
        store: SnapshotStore,
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.source = source
        self.store = store
        self._builder = builder
        self._clock = clock
        self._ranked_set = RankedSet(clock=clock)
        self._inflight: asyncio.Task | None = None

    @property
    def ranked_set(self) -> RankedSet:
        return self._ranked_set

    @property
    def is_refreshing(self) -> bool:
        return self._inflight is not None

    def load_snapshot(self) -> bool:
        return self.store.load_into(self._ranked_set)

    async def refresh(self) -> RefreshResult:
        """Rebuild from upstream, joining a refresh already in flight."""
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._run_refresh())
            self._inflight.add_done_callback(self._clear_inflight)
        else:
            logger.info("Refresh of %s already running; joining it", self.name)
        return await asyncio.shield(self._inflight)

    async def ensure_populated(self) -> None:
        """Refresh if the slot is empty. Failures are logged, not raised."""
        if self._ranked_set.size() > 0:
            return
        logger.info("%s is empty; refreshing before answering", self.name)
        try:
            await self.refresh()
        except Exception:
            logger.exception("Refresh of %s triggered by query failed", self.name)

    def _clear_inflight(self, _task: asyncio.Task) -> None:
        self._inflight = None

    async def _run_refresh(self) -> RefreshResult:
        if self.source is None:
            raise RuntimeError(f"No upstream source configured for {self.name}")

        logger.info("Refreshing %s", self.name)
        fresh = RankedSet(clock=self._clock)
        result = await self._builder(self.source, fresh)
        self._ranked_set = fresh
        self.store.save(fresh)
        logger.info(
            "%s refreshed: %d items, %d skipped",
            self.name, result.inserted, result.skipped,
        )
        return result


@dataclass
class RankingCaches:
    users: CacheSlot
    posts: CacheSlot

    def attach_source(self, source: UpstreamSource) -> None:
        self.users.source = source
        self.posts.source = source


def build_caches(settings: Settings, source: UpstreamSource | None = None) -> RankingCaches:
    """Create both slots and hydrate them from their snapshot files."""
    caches = RankingCaches(
        users=CacheSlot(
            "user ranking", build_user_ranking, source, SnapshotStore(settings.user_snapshot_path)
        ),
        posts=CacheSlot(
            "post ranking", build_post_ranking, source, SnapshotStore(settings.post_snapshot_path)
        ),
    )
    caches.users.load_snapshot()
    caches.posts.load_snapshot()
    return caches
