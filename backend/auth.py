from datetime import datetime, timedelta, timezone
from typing import Optional, Callable
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

import settings
from errors import UnauthorizedError
from schemas import UserResponse
from storage import BlogStore

# auto_error=False: a missing token is our UnauthorizedError, not FastAPI's 403.
security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def create_user_token(user: UserResponse) -> str:
    return create_access_token(data={"sub": user.username, "user_id": user.id})


def verify_token(token: str):
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None


def resolve_user(store: BlogStore, token: Optional[str]) -> Optional[UserResponse]:
    """User behind a bearer token, or None for a missing/invalid/unknown one."""
    if not token:
        return None
    payload = verify_token(token)
    if payload is None:
        return None
    username = payload.get("sub")
    user_id = payload.get("user_id")
    if username is None or user_id is None:
        return None
    user = store.get_user(user_id)
    if user is None or user.username != username:
        return None
    return user


def get_current_user_factory(get_store_func: Callable):
    """get_current_user dependency factory"""
    def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        store: BlogStore = Depends(get_store_func),
    ) -> UserResponse:
        token = credentials.credentials if credentials else None
        user = resolve_user(store, token)
        if user is None:
            raise UnauthorizedError("Invalid authentication credentials")
        return user

    return get_current_user


def get_optional_user_factory(get_store_func: Callable):
    def get_optional_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        store: BlogStore = Depends(get_store_func),
    ) -> Optional[UserResponse]:
        token = credentials.credentials if credentials else None
        return resolve_user(store, token)

    return get_optional_user
