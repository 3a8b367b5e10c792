"""Client for the third-party post provider (dummyjson-compatible).

Public coroutines never raise: any network or parse failure is logged and
collapses to an empty list, so callers treat "no external posts" as normal.
"""

from typing import Optional

import httpx
from loguru import logger
from pydantic import ValidationError as SchemaError

import settings
from content_mapper import ALL_CATEGORIES, map_external_post, map_for_category
from errors import ExternalSourceError
from schemas import ExternalPostPage, PostResponse

DEFAULT_PAGE_SIZE = 10
ALL_CATEGORIES_PAGE_SIZE = 20
CLASSIFICATION_POOL_SIZE = 100


class ExternalPostSource:
    """Fetches provider pages and maps them into local posts."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.EXTERNAL_POSTS_API_BASE).rstrip("/")
        self.timeout = timeout or settings.EXTERNAL_TIMEOUT_SEC
        self._transport = transport
        self.logger = logger.bind(component="ExternalSource")

    async def _get_page(self, path: str, params: dict) -> ExternalPostPage:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                resp = await client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise ExternalSourceError(f"request to {path} failed: {exc}") from exc

        if resp.status_code != 200:
            raise ExternalSourceError(f"{path} returned HTTP {resp.status_code}")
        try:
            return ExternalPostPage.model_validate(resp.json())
        except (ValueError, SchemaError) as exc:
            raise ExternalSourceError(f"{path} returned an unreadable payload: {exc}") from exc

    async def fetch_posts(self, limit: int = DEFAULT_PAGE_SIZE, skip: int = 0) -> list[PostResponse]:
        try:
            page = await self._get_page("/posts", {"limit": limit, "skip": skip})
        except ExternalSourceError as exc:
            self.logger.warning(f"Error fetching external posts: {exc}")
            return []
        return [map_external_post(post) for post in page.posts]

    async def fetch_posts_by_category(self, category: str) -> list[PostResponse]:
        key = (category or ALL_CATEGORIES).lower()
        if key == ALL_CATEGORIES:
            return await self.fetch_posts(ALL_CATEGORIES_PAGE_SIZE)
        try:
            page = await self._get_page("/posts", {"limit": CLASSIFICATION_POOL_SIZE})
        except ExternalSourceError as exc:
            self.logger.warning(f"Error fetching external posts for category {key}: {exc}")
            return []
        posts = map_for_category(page.posts, key)
        self.logger.info(f"Found {len(posts)} posts for category: {key}")
        return posts

    async def search_posts(self, query: str) -> list[PostResponse]:
        try:
            page = await self._get_page("/posts/search", {"q": query})
        except ExternalSourceError as exc:
            self.logger.warning(f"Error searching external posts for {query!r}: {exc}")
            return []
        return [map_external_post(post) for post in page.posts]
