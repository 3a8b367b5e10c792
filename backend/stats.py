"""Aggregate counts for the admin dashboard."""

from storage import BlogStore


def build_admin_stats(store: BlogStore) -> dict:
    posts = store.get_all_posts()
    users = store.get_all_users()
    comments = store.get_all_comments()

    by_category: dict[str, int] = {}
    by_author: dict[str, int] = {}
    for post in posts:
        category = (post.category or "uncategorized").lower()
        by_category[category] = by_category.get(category, 0) + 1
        author = str(post.author_id) if post.author_id is not None else "unknown"
        by_author[author] = by_author.get(author, 0) + 1

    published = sum(1 for p in posts if p.published)
    stamps = [p.created_at for p in posts if p.created_at is not None]

    return {
        "total_posts": len(posts),
        "published_posts": published,
        "draft_posts": len(posts) - published,
        "total_users": len(users),
        "admin_users": sum(1 for u in users if u.is_admin),
        "total_comments": len(comments),
        "posts_by_category": dict(sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)),
        "posts_by_author": by_author,
        "latest_post_at": max(stamps) if stamps else None,
    }
