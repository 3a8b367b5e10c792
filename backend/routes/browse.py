"""Merged home feed: local posts plus external posts, filtered and sorted."""

from fastapi import APIRouter, Depends

from schemas import FeedResponse
from feed import FeedController, FeedView
from deps import get_feed_controller

router = APIRouter(prefix="/api/feed", tags=["feed"])


def _feed_response(view: FeedView) -> FeedResponse:
    return FeedResponse(
        category=view.category,
        search_query=view.search_query,
        sort_by=view.sort_by.value,
        mode=view.mode,
        total=len(view.posts),
        featured=view.featured,
        grid=view.grid,
    )


@router.get("", response_model=FeedResponse)
async def get_feed(
    category: str = "all",
    q: str = "",
    sort: str = "latest",
    controller: FeedController = Depends(get_feed_controller),
):
    view = await controller.apply(category=category, search_query=q, sort_by=sort)
    return _feed_response(view)


@router.get("/search", response_model=FeedResponse)
async def search_feed(q: str = "", controller: FeedController = Depends(get_feed_controller)):
    """External search results replace the feed; category and sort do not apply."""
    view = await controller.search(q)
    return _feed_response(view)


@router.post("/refresh", response_model=FeedResponse)
async def refresh_feed(controller: FeedController = Depends(get_feed_controller)):
    view = await controller.refresh()
    return _feed_response(view)
