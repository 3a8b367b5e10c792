"""Read-side predicates over the store's post enumeration.

Everything here is pure: it takes a sequence of posts and returns a new list,
so the same predicates back both the store lookups and the feed pipeline.
"""

from typing import Iterable, Optional

from schemas import PostResponse
from text_utils import contains_ci


def post_matches_query(post: PostResponse, query: str) -> bool:
    """True if *query* is a case-insensitive substring of title, content or tags."""
    if not query:
        return True
    return (
        contains_ci(post.title, query)
        or contains_ci(post.content, query)
        or contains_ci(post.tags, query)
    )


def search(posts: Iterable[PostResponse], query: Optional[str]) -> list[PostResponse]:
    q = query or ""
    return [p for p in posts if post_matches_query(p, q)]


def by_author(posts: Iterable[PostResponse], author_id: int) -> list[PostResponse]:
    return [p for p in posts if p.author_id == author_id]


def by_category(posts: Iterable[PostResponse], category: str) -> list[PostResponse]:
    """Exact, case-sensitive category match; callers normalize case if they need to."""
    return [p for p in posts if p.category == category]


def by_category_folded(posts: Iterable[PostResponse], category: str) -> list[PostResponse]:
    """Match on the lower-cased post category; posts without one never match."""
    return [p for p in posts if p.category is not None and p.category.lower() == category]
