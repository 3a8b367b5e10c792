"""Normalizes third-party posts into the local post shape.

The provider has no category field, so posts requested "by category" are
picked with a keyword heuristic over tags, title and body, then force-tagged
with the requested category. Every known category always yields posts:
relevance is traded for availability.
"""

from datetime import datetime
from typing import Optional, Sequence

from models import utcnow
from schemas import ExternalPost, PostResponse
from text_utils import join_tags

CATEGORIES = ("Technology", "Travel", "Food", "Lifestyle", "Health", "Writing")
CATEGORY_KEYS = tuple(c.lower() for c in CATEGORIES)
ALL_CATEGORIES = "all"
UNCATEGORIZED = "Uncategorized"

IMAGE_URL_TEMPLATE = "https://picsum.photos/seed/{post_id}/800/500"

MIN_CATEGORY_MATCHES = 5
CATEGORY_PAD_TARGET = 10
FALLBACK_SAMPLE_SIZE = 6

# Substrings looked for inside each tag.
CATEGORY_TAG_KEYWORDS: dict[str, tuple[str, ...]] = {
    "technology": ("tech", "digital", "programming", "computer", "technology", "software", "hardware", "app", "innovation"),
    "travel": ("travel", "trip", "adventure", "vacation", "journey", "tourism", "destination", "explore", "world"),
    "food": ("food", "cooking", "recipe", "cuisine", "meal", "restaurant", "dinner", "lunch", "breakfast", "eat"),
    "lifestyle": ("lifestyle", "life", "living", "family", "home", "personal", "style", "trends", "fashion"),
    "health": ("health", "fitness", "wellness", "exercise", "medical", "nutrition", "workout", "diet", "mental"),
}

# Substrings looked for in title or body.
CATEGORY_CONTENT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "technology": ("new", "digital", "future", "smart", "device", "online", "virtual", "product"),
    "travel": ("visit", "place", "country", "hotel", "experience", "flight", "tour", "holiday"),
    "food": ("delicious", "tasty", "recipe", "cook", "restaurant", "chef", "ingredients", "flavor"),
    "lifestyle": ("trend", "modern", "style", "design", "fashion", "home", "decoration", "living"),
    "health": ("healthy", "exercise", "fitness", "diet", "nutrition", "weight", "wellness", "body"),
}

# Categories matched on tags alone, with no padding.
TAG_ONLY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "writing": ("writing", "writer", "blog", "content", "author", "blogging", "story", "fiction"),
}


def image_url_for(post_id: int) -> str:
    return IMAGE_URL_TEMPLATE.format(post_id=post_id)


def map_external_post(post: ExternalPost, now: Optional[datetime] = None) -> PostResponse:
    """Provider record -> local post. The provider has no timestamps, so created_at is mapping time."""
    category = post.tags[0] if post.tags and post.tags[0] else UNCATEGORIZED
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.body,
        author_id=post.user_id,
        category=category,
        tags=join_tags(post.tags),
        image_url=image_url_for(post.id),
        created_at=now or utcnow(),
        published=True,
    )


def has_keyword_sets(category: str) -> bool:
    return category.lower() in CATEGORY_TAG_KEYWORDS


def _tags_contain(post: ExternalPost, keywords: Sequence[str]) -> bool:
    return any(kw in tag.lower() for tag in post.tags for kw in keywords)


def _text_contains(post: ExternalPost, keywords: Sequence[str]) -> bool:
    title = post.title.lower()
    body = post.body.lower()
    return any(kw in title or kw in body for kw in keywords)


def matches_category(post: ExternalPost, category: str) -> bool:
    key = category.lower()
    if key in CATEGORY_TAG_KEYWORDS:
        return _tags_contain(post, CATEGORY_TAG_KEYWORDS[key]) or _text_contains(
            post, CATEGORY_CONTENT_KEYWORDS.get(key, ())
        )
    if key in TAG_ONLY_KEYWORDS:
        return _tags_contain(post, TAG_ONLY_KEYWORDS[key])
    return any(tag.lower() == key for tag in post.tags)


def tag_with_category(post: ExternalPost, category: str) -> ExternalPost:
    """Copy of *post* whose first tag is *category*, with no other occurrence of it."""
    key = category.lower()
    rest = [tag for tag in post.tags if tag.lower() != key]
    return post.model_copy(update={"tags": [key, *rest]})


def select_for_category(source: Sequence[ExternalPost], category: str) -> list[ExternalPost]:
    """Pick and re-tag the source posts that belong to *category*."""
    key = category.lower()
    matched = [post for post in source if matches_category(post, key)]

    if not matched:
        return [tag_with_category(post, key) for post in source[:FALLBACK_SAMPLE_SIZE]]

    selected = [tag_with_category(post, key) for post in matched]
    if has_keyword_sets(key) and len(selected) < MIN_CATEGORY_MATCHES:
        taken = {post.id for post in matched}
        padding = [post for post in source if post.id not in taken]
        selected.extend(
            tag_with_category(post, key)
            for post in padding[: CATEGORY_PAD_TARGET - len(selected)]
        )
    return selected


def map_for_category(
    source: Sequence[ExternalPost],
    category: str,
    now: Optional[datetime] = None,
) -> list[PostResponse]:
    key = category.lower()
    stamp = now or utcnow()
    mapped = []
    for post in select_for_category(source, key):
        local = map_external_post(post, now=stamp)
        local.category = key
        mapped.append(local)
    return mapped
