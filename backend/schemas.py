from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Any
from datetime import datetime


class CamelModel(BaseModel):
    """Wire models speak camelCase but accept snake_case too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# User Schemas
class UserBase(CamelModel):
    username: str
    full_name: Optional[str] = None


class UserCreate(UserBase):
    password: str


class LoginRequest(CamelModel):
    username: str
    password: str


class UserResponse(UserBase):
    id: int
    is_admin: bool = False


class AuthResponse(CamelModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


# Post Schemas
class PostBase(CamelModel):
    title: str
    content: str
    image_url: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[str] = None
    published: bool = True


class PostCreate(PostBase):
    author_id: Optional[int] = None


class PostUpdate(CamelModel):
    """Partial update; only fields the client actually sent are merged."""

    title: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[str] = None
    author_id: Optional[int] = None
    published: Optional[bool] = None


class PostResponse(PostBase):
    id: int
    author_id: Optional[int] = None
    created_at: Optional[datetime] = None


# Comment Schemas
class CommentBase(CamelModel):
    content: str


class CommentCreate(CommentBase):
    author_id: Optional[int] = None
    post_id: Optional[int] = None


class CommentResponse(CommentBase):
    id: int
    author_id: Optional[int] = None
    post_id: Optional[int] = None
    created_at: Optional[datetime] = None


# External content source
class ExternalPost(CamelModel):
    id: int
    title: str = ""
    body: str = ""
    user_id: Optional[int] = None
    tags: list[str] = Field(default_factory=list)
    reactions: Any = 0  # int, or {"likes": n, "dislikes": n} depending on provider version


class ExternalPostPage(CamelModel):
    posts: list[ExternalPost] = Field(default_factory=list)
    total: int = 0
    skip: int = 0
    limit: int = 0


# Feed
class FeedResponse(CamelModel):
    category: str
    search_query: str
    sort_by: str
    mode: str  # pipeline | search
    total: int
    featured: Optional[PostResponse] = None
    grid: list[PostResponse] = Field(default_factory=list)


# Admin
class AdminStatsResponse(CamelModel):
    total_posts: int
    published_posts: int
    draft_posts: int
    total_users: int
    admin_users: int
    total_comments: int
    posts_by_category: dict[str, int]
    posts_by_author: dict[str, int]
    latest_post_at: Optional[datetime] = None


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    message: str
    errors: list[ErrorDetail] = Field(default_factory=list)
