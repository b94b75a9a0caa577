from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Optional

from app.models.user import UserRole
from app.schemas.auth import UserResponse


class CatalogStats(BaseModel):
    total_users: int
    active_users: int
    total_movies: int
    total_series: int
    total_seasons: int
    total_episodes: int
    total_videos: int
    total_genres: int
    total_categories: int
    active_sessions: int
    pending_password_resets: int


class PageInfo(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class UserPage(BaseModel):
    users: List[UserResponse]
    pagination: PageInfo


class UserUpdate(BaseModel):
    """Admin-side account changes"""
    is_active: Optional[bool] = None
    role: Optional[UserRole] = None


class SessionOwner(BaseModel):
    id: int
    name: str
    username: str
    email: str
    model_config = ConfigDict(from_attributes=True)


class AdminSessionResponse(BaseModel):
    id: str
    user_id: int
    ip_address: Optional[str] = None
    device: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    user: SessionOwner
    model_config = ConfigDict(from_attributes=True)


class AdminSessionPage(BaseModel):
    sessions: List[AdminSessionResponse]
    pagination: PageInfo
