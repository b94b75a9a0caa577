from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

from app.models.video import VideoType
from app.models.watchlist import ContentType


# ==================== WATCHLIST SCHEMAS ====================

class ContentRef(BaseModel):
    """A movie or a series, addressed by catalog id"""
    content_id: int = Field(..., ge=1)
    content_type: ContentType


class WatchlistResponse(BaseModel):
    """Schema for watchlist item response"""
    id: int
    content_id: int
    content_type: ContentType
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class WatchlistCheck(BaseModel):
    content_id: int
    content_type: ContentType
    in_watchlist: bool


# ==================== LIKE SCHEMAS ====================

class LikeResponse(BaseModel):
    id: int
    content_id: int
    content_type: ContentType
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class LikeCount(BaseModel):
    message: str
    like_count: int


class LikeStatus(BaseModel):
    is_liked: bool
    like_count: int
    user_id: Optional[int] = None


# ==================== HISTORY SCHEMAS ====================

class HistoryRecord(ContentRef):
    video_id: Optional[int] = Field(None, ge=1)


class HistoryVideo(BaseModel):
    id: int
    title: str
    quality: Optional[str] = None
    language: Optional[str] = None
    type: VideoType
    model_config = ConfigDict(from_attributes=True)


class HistoryResponse(BaseModel):
    id: int
    content_id: int
    content_type: ContentType
    video_id: Optional[int] = None
    watched_at: datetime
    model_config = ConfigDict(from_attributes=True)


class HistoryEntry(HistoryResponse):
    navigation_url: str
    video: Optional[HistoryVideo] = None


class HistoryPagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class HistoryPage(BaseModel):
    data: List[HistoryEntry]
    pagination: HistoryPagination
