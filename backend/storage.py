"""In-memory entity store: the only owner of users, posts and comments.

The store hands out pydantic snapshots, never the ORM rows themselves, so
nothing outside it can mutate a collection except through these methods.
Relationships are plain ids; callers re-query to follow them.
"""

import secrets
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional, Union

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import queries
import settings
from database import Base, make_engine, make_session_factory
from errors import ConflictError
from models import User, Post, Comment, utcnow
from schemas import (
    UserCreate, UserResponse,
    PostCreate, PostUpdate, PostResponse,
    CommentCreate, CommentResponse,
)

# id and created_at are never updatable.
POST_UPDATABLE_FIELDS = ("title", "content", "image_url", "category", "tags", "author_id", "published")
_NON_NULLABLE_POST_FIELDS = {"title", "content", "published"}


def default_seed_users() -> list[dict]:
    return [
        {
            "username": settings.ADMIN_USERNAME,
            "password": settings.ADMIN_PASSWORD,
            "full_name": settings.ADMIN_FULL_NAME,
            "is_admin": True,
        }
    ]


def merge_post_update(post: Post, update: PostUpdate) -> Post:
    """Shallow merge: fields the caller set overwrite, everything else is kept."""
    provided = update.model_fields_set
    for field in POST_UPDATABLE_FIELDS:
        if field not in provided:
            continue
        value = getattr(update, field)
        if value is None and field in _NON_NULLABLE_POST_FIELDS:
            continue
        setattr(post, field, value)
    return post


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back naive; they were written as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _user_out(row: User) -> UserResponse:
    return UserResponse.model_validate(row)


def _post_out(row: Post) -> PostResponse:
    post = PostResponse.model_validate(row)
    post.created_at = _as_utc(post.created_at)
    return post


def _comment_out(row: Comment) -> CommentResponse:
    comment = CommentResponse.model_validate(row)
    comment.created_at = _as_utc(comment.created_at)
    return comment


class BlogStore:
    """Users, posts and comments with sequential ids that are never reused."""

    def __init__(self, database_url: Optional[str] = None, seed_users: Optional[list[dict]] = None):
        self.logger = logger.bind(component="BlogStore")
        self._engine = make_engine(database_url or settings.DATABASE_URL)
        Base.metadata.create_all(bind=self._engine)
        self._session_factory = make_session_factory(self._engine)
        # One connection backs the in-memory database, so reads are serialized too.
        self._lock = threading.RLock()
        self._seed(default_seed_users() if seed_users is None else seed_users)

    def _seed(self, seed_users: list[dict]) -> None:
        if not seed_users:
            return
        with self._write() as db:
            for data in seed_users:
                if db.query(User).filter(User.username == data["username"]).first():
                    continue
                db.add(User(
                    id=data.get("id"),
                    username=data["username"],
                    password=data["password"],
                    full_name=data.get("full_name"),
                    is_admin=bool(data.get("is_admin", False)),
                ))
        self.logger.debug(f"seeded {len(seed_users)} user(s)")

    @contextmanager
    def _read(self) -> Iterator[Session]:
        with self._lock:
            db = self._session_factory()
            try:
                yield db
            finally:
                db.close()

    @contextmanager
    def _write(self) -> Iterator[Session]:
        with self._lock:
            db = self._session_factory()
            try:
                yield db
                db.commit()
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

    def close(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, data: Union[UserCreate, dict]) -> UserResponse:
        user_data = UserCreate.model_validate(data)
        try:
            with self._write() as db:
                if db.query(User).filter(User.username == user_data.username).first():
                    raise ConflictError("Username already exists")
                row = User(
                    username=user_data.username,
                    password=user_data.password,
                    full_name=user_data.full_name,
                    is_admin=False,
                )
                db.add(row)
                db.flush()
                created = _user_out(row)
        except IntegrityError as exc:
            raise ConflictError("Username already exists") from exc
        self.logger.debug(f"created user id={created.id}")
        return created

    def get_user(self, user_id: int) -> Optional[UserResponse]:
        with self._read() as db:
            row = db.get(User, user_id)
            return _user_out(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[UserResponse]:
        with self._read() as db:
            row = db.query(User).filter(User.username == username).first()
            return _user_out(row) if row else None

    def check_credentials(self, username: str, password: str) -> Optional[UserResponse]:
        """Return the user if *password* matches the stored credential."""
        with self._read() as db:
            row = db.query(User).filter(User.username == username).first()
            if row is None:
                return None
            if not secrets.compare_digest(row.password.encode("utf-8"), password.encode("utf-8")):
                return None
            return _user_out(row)

    def get_all_users(self) -> list[UserResponse]:
        with self._read() as db:
            return [_user_out(row) for row in db.query(User).order_by(User.id.asc()).all()]

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def create_post(self, data: Union[PostCreate, dict]) -> PostResponse:
        post_data = PostCreate.model_validate(data)
        with self._write() as db:
            row = Post(
                title=post_data.title,
                content=post_data.content,
                image_url=post_data.image_url,
                category=post_data.category,
                tags=post_data.tags,
                author_id=post_data.author_id,
                published=post_data.published,
                created_at=utcnow(),
            )
            db.add(row)
            db.flush()
            created = _post_out(row)
        self.logger.debug(f"created post id={created.id} author={created.author_id}")
        return created

    def get_post(self, post_id: int) -> Optional[PostResponse]:
        with self._read() as db:
            row = db.get(Post, post_id)
            return _post_out(row) if row else None

    def update_post(self, post_id: int, update: Union[PostUpdate, dict]) -> Optional[PostResponse]:
        partial = PostUpdate.model_validate(update)
        with self._write() as db:
            row = db.get(Post, post_id)
            if row is None:
                return None
            merge_post_update(row, partial)
            db.flush()
            updated = _post_out(row)
        self.logger.debug(f"updated post id={post_id} fields={sorted(partial.model_fields_set)}")
        return updated

    def delete_post(self, post_id: int) -> bool:
        with self._write() as db:
            row = db.get(Post, post_id)
            if row is None:
                return False
            db.delete(row)
        self.logger.debug(f"deleted post id={post_id}")
        return True

    def get_all_posts(self) -> list[PostResponse]:
        with self._read() as db:
            return [_post_out(row) for row in db.query(Post).order_by(Post.id.asc()).all()]

    def get_posts_by_author(self, author_id: int) -> list[PostResponse]:
        return queries.by_author(self.get_all_posts(), author_id)

    def get_posts_by_category(self, category: str) -> list[PostResponse]:
        return queries.by_category(self.get_all_posts(), category)

    def search_posts(self, query: str) -> list[PostResponse]:
        return queries.search(self.get_all_posts(), query)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def create_comment(self, data: Union[CommentCreate, dict]) -> CommentResponse:
        comment_data = CommentCreate.model_validate(data)
        with self._write() as db:
            row = Comment(
                content=comment_data.content,
                author_id=comment_data.author_id,
                post_id=comment_data.post_id,
                created_at=utcnow(),
            )
            db.add(row)
            db.flush()
            created = _comment_out(row)
        self.logger.debug(f"created comment id={created.id} post={created.post_id}")
        return created

    def get_comment(self, comment_id: int) -> Optional[CommentResponse]:
        with self._read() as db:
            row = db.get(Comment, comment_id)
            return _comment_out(row) if row else None

    def get_comments_by_post(self, post_id: int) -> list[CommentResponse]:
        with self._read() as db:
            rows = db.query(Comment).filter(Comment.post_id == post_id).order_by(Comment.id.asc()).all()
            return [_comment_out(row) for row in rows]

    def get_all_comments(self) -> list[CommentResponse]:
        with self._read() as db:
            return [_comment_out(row) for row in db.query(Comment).order_by(Comment.id.asc()).all()]

    def delete_comment(self, comment_id: int) -> bool:
        with self._write() as db:
            row = db.get(Comment, comment_id)
            if row is None:
                return False
            db.delete(row)
        self.logger.debug(f"deleted comment id={comment_id}")
        return True
