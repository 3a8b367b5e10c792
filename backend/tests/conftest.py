import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from main import create_app
from schemas import ExternalPost, PostResponse
from storage import BlogStore

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_post(
    post_id: int,
    title: str = "Title",
    content: str = "Body",
    category: Optional[str] = None,
    tags: Optional[str] = None,
    minutes: Optional[int] = 0,
    author_id: Optional[int] = 1,
) -> PostResponse:
    """Post snapshot with created_at = T0 + minutes (None for no timestamp)."""
    return PostResponse(
        id=post_id,
        title=title,
        content=content,
        category=category,
        tags=tags,
        author_id=author_id,
        created_at=None if minutes is None else T0 + timedelta(minutes=minutes),
    )


def make_external(post_id: int, title: str = "Plain title", body: str = "Plain words only.", tags=None) -> ExternalPost:
    return ExternalPost(id=post_id, title=title, body=body, user_id=post_id % 5 + 1, tags=tags or [], reactions=0)


class FakeSource:
    """Stands in for ExternalPostSource; records calls, optional per-category delay."""

    def __init__(self, by_category=None, search_results=None, delays=None, failing=(), search_delay=0):
        self.by_category = by_category or {}
        self.search_results = search_results or {}
        self.delays = delays or {}
        self.failing = set(failing)
        self.search_delay = search_delay
        self.calls: list[str] = []
        self.searches: list[str] = []

    async def fetch_posts_by_category(self, category: str):
        self.calls.append(category)
        delay = self.delays.get(category, 0)
        if delay:
            await asyncio.sleep(delay)
        if category in self.failing:
            raise RuntimeError(f"boom: {category}")
        return list(self.by_category.get(category, []))

    async def search_posts(self, query: str):
        self.searches.append(query)
        if self.search_delay:
            await asyncio.sleep(self.search_delay)
        return list(self.search_results.get(query, []))


@pytest.fixture
def store():
    s = BlogStore("sqlite://")
    yield s
    s.close()


@pytest.fixture
def client(store):
    app = create_app(store=store, enable_external=False)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    def _register(username: str, password: str = "secret", full_name: Optional[str] = None) -> dict:
        resp = client.post(
            "/api/register",
            json={"username": username, "password": password, "fullName": full_name},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _register


@pytest.fixture
def admin_token(client):
    resp = client.post("/api/login", json={"username": "admin", "password": "admin"})
    assert resp.status_code == 200, resp.text
    return resp.json()["accessToken"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
