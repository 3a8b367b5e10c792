"""Shared FastAPI dependencies used across route modules."""

from fastapi import Request

from auth import get_current_user_factory, get_optional_user_factory
from feed import FeedController
from storage import BlogStore


def get_store(request: Request) -> BlogStore:
    return request.app.state.store


def get_feed_controller(request: Request) -> FeedController:
    """Fresh feed state per request; the external cache is shared app-wide."""
    state = request.app.state
    return FeedController(
        store=state.store,
        source=state.external_source,
        cache=state.post_cache,
        prefetch=state.prefetch_enabled,
        background=state.background_tasks,
        inflight=state.inflight_fetches,
    )


get_current_user = get_current_user_factory(get_store)
get_optional_user = get_optional_user_factory(get_store)
