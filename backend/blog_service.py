"""Auth, ownership and validation rules around the store's CRUD operations.

Routes call these instead of the store directly. The store reports absence
with None/False; this layer turns that into NotFoundError and enforces
author-or-admin on every mutation.
"""

from typing import Optional, Union

from loguru import logger

from errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from schemas import (
    UserCreate, UserResponse,
    PostCreate, PostUpdate, PostResponse,
    CommentCreate, CommentResponse,
)
from storage import BlogStore
from text_utils import is_blank

log = logger.bind(component="BlogService")


def _require_principal(user: Optional[UserResponse]) -> UserResponse:
    if user is None:
        raise UnauthorizedError()
    return user


def can_modify(user: UserResponse, author_id: Optional[int]) -> bool:
    return user.is_admin or (author_id is not None and author_id == user.id)


def _ensure_can_modify(user: UserResponse, author_id: Optional[int], what: str, entity_id: int) -> None:
    if not can_modify(user, author_id):
        log.info(f"user {user.id} denied on {what} {entity_id}")
        raise ForbiddenError()


def _check_required_text(values: dict[str, Optional[str]]) -> None:
    errors = [
        {"field": name, "message": f"{name} must not be empty"}
        for name, value in values.items()
        if is_blank(value)
    ]
    if errors:
        raise ValidationError("Invalid data", errors=errors)


# ----------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------

def register_user(store: BlogStore, data: Union[UserCreate, dict]) -> UserResponse:
    user_data = UserCreate.model_validate(data)
    _check_required_text({"username": user_data.username, "password": user_data.password})
    user = store.create_user(user_data)
    log.info(f"registered user {user.username} (id={user.id})")
    return user


def authenticate(store: BlogStore, username: str, password: str) -> UserResponse:
    user = store.check_credentials(username, password)
    if user is None:
        raise UnauthorizedError("Invalid credentials")
    return user


def list_users_as(store: BlogStore, user: Optional[UserResponse]) -> list[UserResponse]:
    if user is None or not user.is_admin:
        raise ForbiddenError()
    return store.get_all_users()


# ----------------------------------------------------------------------
# Posts
# ----------------------------------------------------------------------

def require_post(store: BlogStore, post_id: int) -> PostResponse:
    post = store.get_post(post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


def create_post_as(store: BlogStore, user: Optional[UserResponse], data: Union[PostCreate, dict]) -> PostResponse:
    principal = _require_principal(user)
    post_data = PostCreate.model_validate(data)
    _check_required_text({"title": post_data.title, "content": post_data.content})
    post = store.create_post(post_data.model_copy(update={"author_id": principal.id}))
    log.info(f"user {principal.id} created post {post.id}")
    return post


def update_post_as(
    store: BlogStore,
    user: Optional[UserResponse],
    post_id: int,
    data: Union[PostUpdate, dict],
) -> PostResponse:
    principal = _require_principal(user)
    post = require_post(store, post_id)
    _ensure_can_modify(principal, post.author_id, "post", post_id)

    partial = PostUpdate.model_validate(data)
    provided = partial.model_fields_set
    _check_required_text({name: getattr(partial, name) for name in ("title", "content") if name in provided})
    if "author_id" in provided and not principal.is_admin and partial.author_id != principal.id:
        raise ForbiddenError("Only an admin can reassign a post")

    updated = store.update_post(post_id, partial)
    if updated is None:
        raise NotFoundError("Post not found")
    return updated


def delete_post_as(store: BlogStore, user: Optional[UserResponse], post_id: int) -> None:
    principal = _require_principal(user)
    post = require_post(store, post_id)
    _ensure_can_modify(principal, post.author_id, "post", post_id)
    if not store.delete_post(post_id):
        raise NotFoundError("Post not found")
    log.info(f"user {principal.id} deleted post {post_id}")


# ----------------------------------------------------------------------
# Comments
# ----------------------------------------------------------------------

def list_comments(store: BlogStore, post_id: int) -> list[CommentResponse]:
    return store.get_comments_by_post(post_id)


def create_comment_as(
    store: BlogStore,
    user: Optional[UserResponse],
    post_id: int,
    data: Union[CommentCreate, dict],
) -> CommentResponse:
    principal = _require_principal(user)
    require_post(store, post_id)
    comment_data = CommentCreate.model_validate(data)
    _check_required_text({"content": comment_data.content})
    return store.create_comment(
        comment_data.model_copy(update={"author_id": principal.id, "post_id": post_id})
    )


def delete_comment_as(store: BlogStore, user: Optional[UserResponse], comment_id: int) -> None:
    principal = _require_principal(user)
    comment = store.get_comment(comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    _ensure_can_modify(principal, comment.author_id, "comment", comment_id)
    store.delete_comment(comment_id)
