from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models.user import User
from app.models.watchlist import ContentType
from app.schemas.watchlist import ContentRef, LikeCount, LikeResponse, LikeStatus
from app.services.like_service import LikeService
from app.utils.dependencies import get_current_user, get_optional_user_id

router = APIRouter(prefix="/api/likes", tags=["Likes"])


@router.get("", response_model=List[LikeResponse])
def get_likes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return LikeService.get_likes(db, current_user.id)


@router.post("", response_model=LikeCount, status_code=status.HTTP_201_CREATED)
def add_like(
    item: ContentRef,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    like_count = LikeService.add_like(db, current_user.id, item)
    return {"message": "Liked", "like_count": like_count}


@router.get("/check", response_model=LikeStatus)
def check_like(
    content_id: int = Query(..., ge=1),
    content_type: ContentType = Query(...),
    user_id: Optional[int] = Depends(get_optional_user_id),
    db: Session = Depends(get_db)
):
    """Like count for a title, and whether the caller (if signed in) likes it"""
    return LikeService.like_status(db, content_id, content_type, user_id)


@router.delete("/{content_type}/{content_id}", response_model=LikeCount)
def remove_like(
    content_type: ContentType,
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    like_count = LikeService.remove_like(db, current_user.id, content_id, content_type)
    return {"message": "Like removed", "like_count": like_count}
