"""Registration, login, profile and admin-only user routes."""

from fastapi import APIRouter, Depends, status
from typing import List, Optional

from schemas import UserCreate, UserResponse, LoginRequest, AuthResponse, AdminStatsResponse
from auth import create_user_token
from blog_service import register_user, authenticate, list_users_as
from errors import ForbiddenError
from stats import build_admin_stats
from storage import BlogStore
from deps import get_store, get_current_user, get_optional_user

router = APIRouter(prefix="/api", tags=["users"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, store: BlogStore = Depends(get_store)):
    user = register_user(store, user_data)
    return AuthResponse(user=user, access_token=create_user_token(user))


@router.post("/login", response_model=AuthResponse)
async def login(credentials: LoginRequest, store: BlogStore = Depends(get_store)):
    user = authenticate(store, credentials.username, credentials.password)
    return AuthResponse(user=user, access_token=create_user_token(user))


@router.get("/user", response_model=UserResponse)
async def current_user(user: UserResponse = Depends(get_current_user)):
    return user


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    user: Optional[UserResponse] = Depends(get_optional_user),
    store: BlogStore = Depends(get_store),
):
    return list_users_as(store, user)


@router.get("/admin/stats", response_model=AdminStatsResponse)
async def admin_stats(
    user: Optional[UserResponse] = Depends(get_optional_user),
    store: BlogStore = Depends(get_store),
):
    if user is None or not user.is_admin:
        raise ForbiddenError()
    return build_admin_stats(store)
