from .users import router as users_router
from .posts import router as posts_router
from .browse import router as feed_router

__all__ = ["users_router", "posts_router", "feed_router"]
