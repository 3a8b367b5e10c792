"""Post and comment routes."""

from fastapi import APIRouter, Depends, Response, status
from typing import List

from schemas import (
    UserResponse,
    PostCreate, PostUpdate, PostResponse,
    CommentCreate, CommentResponse,
)
from blog_service import (
    require_post, create_post_as, update_post_as, delete_post_as,
    list_comments, create_comment_as, delete_comment_as,
)
from storage import BlogStore
from deps import get_store, get_current_user

router = APIRouter(prefix="/api", tags=["posts"])


@router.get("/posts", response_model=List[PostResponse])
async def get_posts(store: BlogStore = Depends(get_store)):
    return store.get_all_posts()


@router.get("/posts/search", response_model=List[PostResponse])
async def search_posts(q: str = "", store: BlogStore = Depends(get_store)):
    return store.search_posts(q)


@router.get("/posts/category/{category}", response_model=List[PostResponse])
async def get_posts_by_category(category: str, store: BlogStore = Depends(get_store)):
    return store.get_posts_by_category(category)


@router.get("/posts/author/{author_id}", response_model=List[PostResponse])
async def get_posts_by_author(author_id: int, store: BlogStore = Depends(get_store)):
    return store.get_posts_by_author(author_id)


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, store: BlogStore = Depends(get_store)):
    return require_post(store, post_id)


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    user: UserResponse = Depends(get_current_user),
    store: BlogStore = Depends(get_store),
):
    return create_post_as(store, user, post_data)


@router.put("/posts/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    post_data: PostUpdate,
    user: UserResponse = Depends(get_current_user),
    store: BlogStore = Depends(get_store),
):
    return update_post_as(store, user, post_id, post_data)


@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    user: UserResponse = Depends(get_current_user),
    store: BlogStore = Depends(get_store),
):
    delete_post_as(store, user, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/posts/{post_id}/comments", response_model=List[CommentResponse])
async def get_comments(post_id: int, store: BlogStore = Depends(get_store)):
    return list_comments(store, post_id)


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: int,
    comment_data: CommentCreate,
    user: UserResponse = Depends(get_current_user),
    store: BlogStore = Depends(get_store),
):
    return create_comment_as(store, user, post_id, comment_data)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    user: UserResponse = Depends(get_current_user),
    store: BlogStore = Depends(get_store),
):
    delete_comment_as(store, user, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
