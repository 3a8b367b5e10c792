"""Post aggregation pipeline: merge local and external posts, filter, sort.

`aggregate_posts` is the whole transform and is pure. `FeedController`
holds the live parameters (category, search query, sort key), keeps the
external contribution fresh through the category cache, and recomputes the
view on every change.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import timezone
from enum import Enum
from functools import partial
from typing import Iterable, Optional, Union

from loguru import logger

import queries
from content_mapper import ALL_CATEGORIES, CATEGORY_KEYS
from external_source import ExternalPostSource
from post_cache import CategoryCache
from schemas import PostResponse
from storage import BlogStore
from text_utils import collation_key


class SortKey(str, Enum):
    LATEST = "latest"
    OLDEST = "oldest"
    TITLE_ASC = "title_asc"
    TITLE_DESC = "title_desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortKey":
        """Unknown or missing keys fall back to latest."""
        try:
            return cls(value)
        except ValueError:
            return cls.LATEST


def _epoch_seconds(post: PostResponse) -> float:
    ts = post.created_at
    if ts is None:
        return 0.0
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.timestamp()


def filter_by_category(posts: Iterable[PostResponse], category: str) -> list[PostResponse]:
    if not category or category == ALL_CATEGORIES:
        return list(posts)
    return queries.by_category_folded(posts, category)


def filter_by_search(posts: Iterable[PostResponse], search_query: str) -> list[PostResponse]:
    if not search_query:
        return list(posts)
    return queries.search(posts, search_query)


def sort_posts(posts: Iterable[PostResponse], sort_by: Union[SortKey, str, None]) -> list[PostResponse]:
    """Stable sort; reverse=True keeps equal elements in their input order."""
    key = SortKey.parse(sort_by)
    if key is SortKey.OLDEST:
        return sorted(posts, key=_epoch_seconds)
    if key is SortKey.TITLE_ASC:
        return sorted(posts, key=lambda p: collation_key(p.title))
    if key is SortKey.TITLE_DESC:
        return sorted(posts, key=lambda p: collation_key(p.title), reverse=True)
    return sorted(posts, key=_epoch_seconds, reverse=True)


def aggregate_posts(
    posts: Iterable[PostResponse],
    category: str = ALL_CATEGORIES,
    search_query: str = "",
    sort_by: Union[SortKey, str, None] = SortKey.LATEST,
) -> list[PostResponse]:
    """Category filter, then search filter, then sort. Never mutates *posts*."""
    selected = filter_by_category(posts, category)
    selected = filter_by_search(selected, search_query)
    return sort_posts(selected, sort_by)


@dataclass
class FeedView:
    posts: list[PostResponse]
    category: str = ALL_CATEGORIES
    search_query: str = ""
    sort_by: SortKey = SortKey.LATEST
    mode: str = "pipeline"  # pipeline | search
    stale_drops: int = field(default=0, compare=False)

    @property
    def featured(self) -> Optional[PostResponse]:
        return self.posts[0] if self.posts else None

    @property
    def grid(self) -> list[PostResponse]:
        return self.posts[1:]


class FeedController:
    """Live feed state over a store and an optional external source."""

    def __init__(
        self,
        store: BlogStore,
        source: Optional[ExternalPostSource] = None,
        cache: Optional[CategoryCache] = None,
        prefetch: bool = True,
        background: Optional[set] = None,
        inflight: Optional[dict] = None,
    ):
        self.store = store
        self.source = source
        self.cache = cache if cache is not None else CategoryCache()
        self.prefetch_enabled = prefetch
        self.category = ALL_CATEGORIES
        self.search_query = ""
        self.sort_by = SortKey.LATEST
        self.logger = logger.bind(component="FeedController")

        self._external: list[PostResponse] = []
        self._search_results: Optional[list[PostResponse]] = None
        self._generation = 0
        self._search_generation = 0
        self._stale_drops = 0
        # Task refs outlive the controller when the set is shared (per-request controllers).
        self._background: set[asyncio.Task] = background if background is not None else set()
        # One pending provider fetch per category, shared the same way.
        self._inflight: dict[str, asyncio.Task] = inflight if inflight is not None else {}

    # ------------------------------------------------------------------
    # External contribution
    # ------------------------------------------------------------------

    async def _fetch(self, key: str) -> list[PostResponse]:
        posts = await self.source.fetch_posts_by_category(key)
        if posts:
            # An empty result is a failed fetch; retry next time instead of pinning it.
            self.cache.put(key, posts)
        return posts

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    def _fetch_task(self, key: str) -> asyncio.Task:
        """The pending fetch for *key*, started if none is running."""
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._fetch(key))
            self._inflight[key] = task
            task.add_done_callback(partial(self._forget, key))
        return task

    async def load_external(self, category: str) -> list[PostResponse]:
        """Cached posts for *category*; a miss joins the pending fetch or starts one."""
        key = category.lower()
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        if self.source is None:
            return []
        # shield: a cancelled request must not cancel a fetch other requests await.
        return await asyncio.shield(self._fetch_task(key))

    async def _reload(self) -> None:
        self._generation += 1
        generation = self._generation
        category = self.category
        posts = await self.load_external(category)
        if generation != self._generation:
            self._stale_drops += 1
            self.logger.debug(f"dropped stale external result for {category} (gen {generation})")
            return
        self._external = posts

    async def _warm(self, fetch: asyncio.Task, category: str) -> None:
        try:
            await fetch
        except Exception as exc:
            self.logger.debug(f"prefetch of {category} failed: {exc}")

    def _prefetch_others(self, current: str) -> None:
        if not self.prefetch_enabled or self.source is None:
            return
        for category in CATEGORY_KEYS:
            if category == current or category in self._inflight or category in self.cache:
                continue
            task = asyncio.create_task(self._warm(self._fetch_task(category), category))
            self._background.add(task)
            task.add_done_callback(self._background.discard)

    async def wait_for_prefetch(self) -> None:
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def _leave_search_mode(self) -> None:
        # Any pending search result is older than this change and must not land.
        self._search_generation += 1
        self._search_results = None

    async def set_category(self, category: Optional[str]) -> FeedView:
        self.category = (category or ALL_CATEGORIES).lower()
        self._leave_search_mode()
        self._prefetch_others(self.category)
        await self._reload()
        return self.view()

    def set_sort(self, sort_by: Optional[str]) -> FeedView:
        self.sort_by = SortKey.parse(sort_by)
        self._leave_search_mode()
        return self.view()

    def set_search_query(self, search_query: Optional[str]) -> FeedView:
        self.search_query = search_query or ""
        self._leave_search_mode()
        return self.view()

    async def apply(
        self,
        category: Optional[str] = None,
        search_query: Optional[str] = None,
        sort_by: Optional[str] = None,
    ) -> FeedView:
        """Set all three parameters and reload once."""
        self.sort_by = SortKey.parse(sort_by)
        self.search_query = search_query or ""
        return await self.set_category(category)

    async def search(self, query: Optional[str]) -> FeedView:
        """Independent search mode: the external search results replace the feed.

        Category filtering and sorting are bypassed while the mode is active.
        An empty query leaves the mode.
        """
        self.search_query = query or ""
        if not self.search_query:
            self._leave_search_mode()
            return self.view()
        self._search_generation += 1
        generation = self._search_generation
        results = await self.source.search_posts(self.search_query) if self.source else []
        if generation != self._search_generation:
            self._stale_drops += 1
            self.logger.debug(f"dropped stale search result for {query!r}")
            return self.view()
        self._search_results = results
        return self.view()

    async def refresh(self) -> FeedView:
        self.cache.invalidate()
        self._leave_search_mode()
        await self._reload()
        return self.view()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def view(self) -> FeedView:
        if self._search_results is not None:
            return FeedView(
                posts=list(self._search_results),
                category=self.category,
                search_query=self.search_query,
                sort_by=self.sort_by,
                mode="search",
                stale_drops=self._stale_drops,
            )
        merged = self.store.get_all_posts() + list(self._external)
        return FeedView(
            posts=aggregate_posts(merged, self.category, self.search_query, self.sort_by),
            category=self.category,
            search_query=self.search_query,
            sort_by=self.sort_by,
            stale_drops=self._stale_drops,
        )
